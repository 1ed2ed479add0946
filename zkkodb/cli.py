"""Command-line front end for the zkkodb command decoder."""

from typing import Optional, Sequence
import argparse
import logging
import os
import sys

from dotenv import load_dotenv

from .protocol import DecodeError, dumps, loads

logger = logging.getLogger(__name__)

_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

def _read(path: Optional[str]) -> bytes:
	if path is None or path == '-':
		return sys.stdin.buffer.read()
	with open(path, 'rb') as f:
		return f.read()

def decode_command(args: argparse.Namespace) -> int:
	source = args.file or '<stdin>'
	try:
		command = loads(_read(args.file))
	except OSError as e:
		logger.debug('cannot read %s: %r', source, e)
		print(f'error: {e.strerror}: {source}', file = sys.stderr)
		return 1
	except DecodeError as e:
		logger.debug('rejected %s: %r', source, e)
		print(f'error: {e}', file = sys.stderr)
		return 1

	logger.info('decoded %s', type(command).__name__)
	print(dumps(command, indent = args.indent))
	return 0

def check_command(args: argparse.Namespace) -> int:
	failed = 0
	for path in args.files:
		try:
			command = loads(_read(path))
		except OSError as e:
			logger.error('cannot read %s: %s', path, e)
			print(f'{path}: error: {e.strerror}')
			failed += 1
		except DecodeError as e:
			logger.debug('rejected %s: %r', path, e)
			print(f'{path}: error: {e}')
			failed += 1
		else:
			print(f'{path}: ok ({type(command).__name__})')

	return 1 if failed else 0

def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog = 'zkkodb', description = 'Decode and validate zkkodb command messages')
	parser.add_argument(
		'--log-level',
		type = str.upper,
		choices = _LOG_LEVELS,
		default = os.environ.get('ZKKODB_LOG_LEVEL', 'WARNING').upper(),
		help = 'logging level (default: $ZKKODB_LOG_LEVEL or WARNING)',
	)

	subparsers = parser.add_subparsers(dest = 'action', required = True)

	decode_parser = subparsers.add_parser('decode', help = 'decode one message and print its normalized form')
	decode_parser.add_argument('file', nargs = '?', help = 'JSON file to read (default: stdin)')
	decode_parser.add_argument('--indent', type = int, default = None, help = 'indent the printed JSON')
	decode_parser.set_defaults(handler = decode_command)

	check_parser = subparsers.add_parser('check', help = 'validate one or more message files')
	check_parser.add_argument('files', nargs = '+', help = 'JSON files to validate')
	check_parser.set_defaults(handler = check_command)

	return parser

def main(argv: Optional[Sequence[str]] = None) -> int:
	load_dotenv()
	parser = build_parser()
	args = parser.parse_args(argv)
	if args.log_level not in _LOG_LEVELS:
		parser.error(f'invalid log level {args.log_level!r}')

	logging.basicConfig(
		level = args.log_level,
		format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
	)

	return args.handler(args)

if __name__ == '__main__':
	sys.exit(main())
