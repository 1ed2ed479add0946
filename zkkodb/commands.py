from dataclasses import dataclass, field
from typing import Optional

from .state import *

@dataclass(frozen = True)
class Command:
	pass

@dataclass(frozen = True)
class CreateCommand(Command):
	command = 'create'

@dataclass(frozen = True)
class CreateUser(CreateCommand):
	type = 'user'

	username: str
	password: str
	role: str

@dataclass(frozen = True)
class CreateTable(CreateCommand):
	type = 'table'

	table: str
	primary_key: str
	rows: Columns

@dataclass(frozen = True)
class ReadCommand(Command):
	command = 'read'

	table: str
	filter: Row = field(default_factory = dict)
	limit: Optional[int] = None

@dataclass(frozen = True)
class UpdateCommand(Command):
	command = 'update'

@dataclass(frozen = True)
class UpdateRows(UpdateCommand):
	type = 'rows'

	table: str
	add: Columns

@dataclass(frozen = True)
class UpdateContent(UpdateCommand):
	type = 'content'

	table: str
	filter: str
	rows: Row

@dataclass(frozen = True)
class InsertCommand(Command):
	command = 'insert'

	table: str
	rows: Row

@dataclass(frozen = True)
class DeleteCommand(Command):
	command = 'delete'

@dataclass(frozen = True)
class DeleteTable(DeleteCommand):
	type = 'table'

	table: str

@dataclass(frozen = True)
class DeleteContent(DeleteCommand):
	type = 'content'

	table: str
	filter: str
