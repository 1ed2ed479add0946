"""Wire codec for zkkodb commands: `decode`/`loads` in, `encode`/`dumps` out."""

from dataclasses import fields, is_dataclass
from typing import Any, Dict, Mapping, Optional, Type, Union, get_args, get_origin, get_type_hints
import json

from dacite.core import from_dict
from dacite.config import Config
from dacite.exceptions import MissingValueError, WrongTypeError

from .commands import *

class DecodeError(Exception):
	def __eq__(self, other: object) -> bool:
		return type(self) is type(other) and self.args == other.args

	def __hash__(self) -> int:
		return hash((type(self), self.args))

class NotAnObject(DecodeError):
	def __init__(self, kind: str) -> None:
		super().__init__(kind)
		self.kind = kind

	def __str__(self) -> str:
		return f'message must be an object, got {self.kind}'

class MissingDiscriminant(DecodeError):
	def __init__(self, field: str) -> None:
		super().__init__(field)
		self.field = field

	def __str__(self) -> str:
		return f'missing discriminant {self.field!r}'

class UnknownVariant(DecodeError):
	def __init__(self, field: str, value: str) -> None:
		super().__init__(field, value)
		self.field = field
		self.value = value

	def __str__(self) -> str:
		return f'unknown {self.field} {self.value!r}'

class MissingField(DecodeError):
	def __init__(self, variant: str, field: str) -> None:
		super().__init__(variant, field)
		self.variant = variant
		self.field = field

	def __str__(self) -> str:
		return f'{self.variant}: missing field {self.field!r}'

class TypeMismatch(DecodeError):
	def __init__(self, field: str, expected: str) -> None:
		super().__init__(field, expected)
		self.field = field
		self.expected = expected

	def __str__(self) -> str:
		return f'{self.field}: expected {self.expected}'

class DuplicateKey(DecodeError):
	def __init__(self, mapping: str, key: str) -> None:
		super().__init__(mapping, key)
		self.mapping = mapping
		self.key = key

	def __str__(self) -> str:
		return f'{self.mapping}: duplicate key {self.key!r}'

class InvalidJson(DecodeError):
	def __init__(self, reason: str) -> None:
		super().__init__(reason)
		self.reason = reason

	def __str__(self) -> str:
		return f'invalid json: {self.reason}'

class JsonObject(dict):
	# remembers keys seen more than once
	def __init__(self, pairs: Any = ()) -> None:
		pairs = list(pairs.items() if isinstance(pairs, Mapping) else pairs)
		super().__init__(pairs)

		seen = set()
		duplicates = []
		for key, _ in pairs:
			if key in seen and key not in duplicates:
				duplicates.append(key)
			seen.add(key)
		self.duplicate_keys = tuple(duplicates)

_dacite_config = Config(check_types = True, strict_unions_match = True)

_COMMANDS: Dict[str, Type[Command]] = {
	command_class.command: command_class
	for command_class in (CreateCommand, ReadCommand, UpdateCommand, InsertCommand, DeleteCommand)
}

_SUBCOMMANDS: Dict[Type[Command], Dict[str, Type[Command]]] = {
	CreateCommand: {CreateUser.type: CreateUser, CreateTable.type: CreateTable},
	UpdateCommand: {UpdateRows.type: UpdateRows, UpdateContent.type: UpdateContent},
	DeleteCommand: {DeleteTable.type: DeleteTable, DeleteContent.type: DeleteContent},
}

_SHAPES = {
	str: 'string',
	bool: 'boolean',
	int: 'integer',
	float: 'number',
}

def variant_name(command_class: Type[Command]) -> str:
	subtype = getattr(command_class, 'type', None)
	return f'{command_class.command}.{subtype}' if subtype else command_class.command

def decode(message: Any) -> Command:
	if not isinstance(message, Mapping):
		raise NotAnObject(type(message).__name__)
	_check_duplicates(message, 'message')

	command_class = _select(message, 'command', _COMMANDS)
	if command_class in _SUBCOMMANDS:
		command_class = _select(message, 'type', _SUBCOMMANDS[command_class])

	return _build(command_class, message, variant_name(command_class))

def parse_json(text: Union[str, bytes]) -> Any:
	try:
		return json.loads(text, object_pairs_hook = JsonObject)
	except ValueError as e:
		raise InvalidJson(str(e)) from e
	except RecursionError:
		raise InvalidJson('nesting too deep') from None

def loads(text: Union[str, bytes]) -> Command:
	return decode(parse_json(text))

def encode(command: Command) -> Dict[str, Any]:
	if type(command) in _SUBCOMMANDS or not hasattr(command, 'command'):
		raise TypeError(f'{type(command).__name__} is not a concrete command')

	message: Dict[str, Any] = {'command': command.command}
	subtype = getattr(command, 'type', None)
	if subtype:
		message['type'] = subtype
	message.update(_encode_fields(command))
	return message

def dumps(command: Command, **kwargs: Any) -> str:
	return json.dumps(encode(command), **kwargs)

def _join(path: str, key: Any) -> str:
	return f'{path}.{key}' if path else str(key)

def _check_duplicates(mapping: Mapping, path: str) -> None:
	for key in getattr(mapping, 'duplicate_keys', ()):
		raise DuplicateKey(path, key)

def _object(value: Any, path: str) -> Mapping:
	if not isinstance(value, Mapping):
		raise TypeMismatch(path, 'object')
	_check_duplicates(value, path)
	for key in value:
		if not isinstance(key, str):
			raise TypeMismatch(_join(path, key), 'string key')
	return value

def _select(message: Mapping, field: str, variants: Dict[str, Type[Command]]) -> Type[Command]:
	if field not in message:
		raise MissingDiscriminant(field)

	value = message[field]
	if not isinstance(value, str):
		raise TypeMismatch(field, 'string')
	if value not in variants:
		raise UnknownVariant(field, value)
	return variants[value]

def _wire_key(data_class: type, name: str) -> str:
	for f in fields(data_class):
		if f.name == name:
			return f.metadata.get('wire', name)
	return name

def _shape(type_: Any) -> str:
	args = [arg for arg in get_args(type_) if arg is not type(None)]
	if get_origin(type_) is Union and len(args) == 1:
		type_ = args[0]
	if get_origin(type_) in (dict, Mapping):
		return 'object'
	return _SHAPES.get(type_, getattr(type_, '__name__', str(type_)))

def _build(data_class: type, message: Mapping, variant: str, path: str = '') -> Any:
	hints = get_type_hints(data_class)
	data: Dict[str, Any] = {}

	for f in fields(data_class):
		key = f.metadata.get('wire', f.name)
		if key not in message:
			continue

		field_path = _join(path, key)
		value = message[key]
		hint = hints[f.name]
		if hint == Columns:
			value = _columns(value, variant, field_path)
		elif hint == Row:
			value = _row(value, field_path)
		elif hint == Optional[int]:
			_check_count(value, field_path)
		data[f.name] = value

	try:
		return from_dict(data_class, data, _dacite_config)
	except MissingValueError as e:
		raise MissingField(variant, _join(path, _wire_key(data_class, e.field_path))) from None
	except WrongTypeError as e:
		raise TypeMismatch(_join(path, _wire_key(data_class, e.field_path)), _shape(e.field_type)) from None

def _check_count(value: Any, path: str) -> None:
	if value is None:
		return
	if isinstance(value, bool) or not isinstance(value, int) or value < 0:
		raise TypeMismatch(path, 'non-negative integer')

def _columns(value: Any, variant: str, path: str) -> Columns:
	columns = {}
	for name, definition in _object(value, path).items():
		column_path = _join(path, name)
		columns[name] = _build(ColumnDefinition, _object(definition, column_path), variant, column_path)
	return columns

def _row(value: Any, path: str) -> Row:
	return _value(_object(value, path), path)

def _container(value: Any, path: str) -> Any:
	if isinstance(value, list):
		return []
	if isinstance(value, Mapping):
		return {}
	raise TypeMismatch(path, 'json value')

def _value(value: Any, path: str) -> Value:
	if value is None or isinstance(value, (bool, int, float, str)):
		return value

	# explicit stack, nesting depth is bounded only by the parser
	root = _container(value, path)
	pending = [(value, root, path)]
	while pending:
		source, target, source_path = pending.pop()
		if isinstance(source, list):
			items = ((f'{source_path}[{i}]', i, item) for i, item in enumerate(source))
		else:
			items = ((_join(source_path, name), name, item) for name, item in _object(source, source_path).items())

		for item_path, key, item in items:
			if item is None or isinstance(item, (bool, int, float, str)):
				copy = item
			else:
				copy = _container(item, item_path)
				pending.append((item, copy, item_path))

			if isinstance(target, list):
				target.append(copy)
			else:
				target[key] = copy

	return root

def _encode_fields(obj: Any) -> Dict[str, Any]:
	data = {}
	for f in fields(obj):
		value = getattr(obj, f.name)
		if isinstance(value, dict):
			value = {
				name: _encode_fields(item) if is_dataclass(item) else _value(item, name)
				for name, item in value.items()
			}
		data[f.metadata.get('wire', f.name)] = value
	return data
