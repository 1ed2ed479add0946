from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from typing_extensions import TypeAlias

# JSON-native row content, left uninterpreted until execution.
Value: TypeAlias = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

Row: TypeAlias = Dict[str, Any]

@dataclass(frozen = True)
class ColumnDefinition:
	col_type: str = field(metadata = {'wire': 'type'})
	not_null: bool = False
	unique: bool = False
	default: Optional[str] = None

Columns: TypeAlias = Dict[str, ColumnDefinition]
