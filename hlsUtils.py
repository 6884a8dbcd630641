####################################
#
# HLS Tag Toolkit - shared parsing substrate
#
# Scalar tokens, quoted strings, tag prefixes and attribute lists.
# RFC 8216 section 4.2 defines the attribute-list grammar used here:
#
#   #EXT-X-NAME:KEY=VALUE,KEY="quoted, value",KEY=VALUE
#
####################################

import logging
import re
from decimal import Decimal

from hlsErrors import InvalidInputError, UnmatchedPrefixError

MAX_UNSIGNED_INTEGER = 2 ** 64 - 1

_DIGITS = re.compile(r'[0-9]+')
_DECIMAL_FLOAT = re.compile(r'[0-9]+(\.[0-9]*)?')
_SIGNED_DECIMAL_FLOAT = re.compile(r'-?[0-9]+(\.[0-9]*)?')


def parseUnsignedInteger(text):
	# Only a plain run of ASCII digits is a decimal-integer.  int() on its own
	# would also take '+1', ' 1', '1_000' and non-ASCII digits.
	if not text:
		raise InvalidInputError(text, 'empty decimal-integer')
	if not _DIGITS.fullmatch(text):
		raise InvalidInputError(text, 'not a decimal-integer')
	number = int(text)
	if number > MAX_UNSIGNED_INTEGER:
		raise InvalidInputError(text, 'decimal-integer does not fit in 64 bits')
	return number


def parseBooleanToken(text):
	if text == 'YES':
		return True
	if text == 'NO':
		return False
	raise InvalidInputError(text, 'expected YES or NO')


def formatBooleanToken(value):
	if value:
		return 'YES'
	return 'NO'


def parseDecimalFloat(text, signed=False):
	# Returns an int when there is no fractional part so that callers can tell
	# '10' from '10.0'.
	pattern = _SIGNED_DECIMAL_FLOAT if signed else _DECIMAL_FLOAT
	if not pattern.fullmatch(text):
		raise InvalidInputError(text, 'not a decimal-floating-point')
	if '.' in text:
		return float(text)
	number = int(text)
	if signed and text.startswith('-'):
		return number
	if number > MAX_UNSIGNED_INTEGER:
		raise InvalidInputError(text, 'decimal-integer does not fit in 64 bits')
	return number


def formatDecimalFloat(value):
	# Plain decimal text; repr() alone gives exponent forms such as 1e-05
	if isinstance(value, int):
		return str(value)
	text = repr(value)
	if 'e' in text or 'E' in text:
		text = format(Decimal(text), 'f')
	if '.' not in text:
		text += '.0'
	return text


def parseByteRange(text):
	# <n>[@<o>]
	length, sep, offset = text.partition('@')
	length = parseUnsignedInteger(length)
	if not sep:
		return length, None
	return length, parseUnsignedInteger(offset)


def formatByteRange(length, offset=None):
	if offset is None:
		return str(length)
	return '%d@%d' % (length, offset)


def unquote(value):
	# The RFC forbids '"', CR and LF inside a quoted-string, so they are simply
	# removed rather than reported.
	return str(value).replace('"', '').replace('\n', '').replace('\r', '')


def quote(value):
	# Strip inner quotes first so an already quoted value is not wrapped twice.
	return '"' + str(value).replace('"', '') + '"'


def matchPrefix(line, prefix):
	if not line.startswith(prefix):
		raise UnmatchedPrefixError(prefix, line)
	return line[len(prefix):]


class AttributeList(dict):
	# Ordered KEY -> value mapping.  quoted holds the keys whose value was a
	# quoted-string in the source text.
	def __init__(self, *args, **kwargs):
		dict.__init__(self, *args, **kwargs)
		self.quoted = set()

	def isQuoted(self, key):
		return key in self.quoted


def _splitAttributes(text):
	segments = []
	current = []
	inQuotes = False
	for char in text:
		if char == '"':
			inQuotes = not inQuotes
			current.append(char)
		elif char == ',' and not inQuotes:
			segments.append(''.join(current))
			current = []
		else:
			current.append(char)
	if inQuotes:
		raise InvalidInputError(text, 'unterminated quoted-string')
	segments.append(''.join(current))
	return segments


def parseAttributeList(text):
	logging.debug("++---------->> parseAttributeList: %s", text)
	attributes = AttributeList()
	for segment in _splitAttributes(text):
		key, sep, value = segment.partition('=')
		if not sep:
			raise InvalidInputError(segment, 'attribute is missing "="')
		if not key:
			raise InvalidInputError(segment, 'attribute name is empty')
		if key in attributes:
			raise InvalidInputError(segment, 'attribute repeated: ' + key)
		if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
			if '"' in value[1:-1]:
				raise InvalidInputError(segment, 'stray quote in quoted-string')
			attributes[key] = unquote(value)
			attributes.quoted.add(key)
		elif '"' in value:
			raise InvalidInputError(segment, 'stray quote in attribute value')
		else:
			attributes[key] = value
	return attributes


def formatAttributeList(pairs):
	# pairs are (key, already formatted value) in output order
	return ','.join(key + '=' + value for key, value in pairs)
