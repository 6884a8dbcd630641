####################################
#
# HLS Tag Toolkit - attribute value codecs
#
# Each codec turns one raw attribute value (from hlsUtils.parseAttributeList)
# into a Python value, checks a Python value before it goes into a tag, and
# formats it back to wire text.  The value kinds follow RFC 8216 section
# 4.2: decimal-integer, decimal-floating-point, quoted-string,
# enumerated-string, hexadecimal-sequence and decimal-resolution.
#
####################################

import re
from collections import namedtuple

from hlsErrors import InvalidInputError
from hlsUtils import (MAX_UNSIGNED_INTEGER, formatBooleanToken, formatByteRange, formatDecimalFloat,
	parseBooleanToken, parseByteRange, parseDecimalFloat, parseUnsignedInteger, quote)

# One row of a tag's attribute schema.  key is the wire name, field the
# name of the tag value's field.
Attribute = namedtuple('Attribute', ['key', 'field', 'codec', 'required'])


class BareToken(str):
	# A bare enumerated token accepted where a quoted-string is also legal,
	# e.g. CLOSED-CAPTIONS=NONE.
	def __repr__(self):
		return 'BareToken(%s)' % str.__repr__(self)


class Codec(object):
	quoted = False

	def parse(self, attributes, key):
		if attributes.isQuoted(key) != self.quoted:
			if self.quoted:
				raise InvalidInputError(key + '=' + attributes[key], 'expected a quoted-string')
			raise InvalidInputError(key + '="' + attributes[key] + '"', 'unexpected quoted-string')
		return self.decode(attributes[key])

	def decode(self, text):
		return text

	def format(self, value):
		return str(value)

	def check(self, value, key):
		pass


class IntegerCodec(Codec):
	def decode(self, text):
		return parseUnsignedInteger(text)

	def check(self, value, key):
		if isinstance(value, bool) or not isinstance(value, int):
			raise InvalidInputError(repr(value), key + ' must be an integer')
		if value < 0 or value > MAX_UNSIGNED_INTEGER:
			raise InvalidInputError(repr(value), key + ' is out of range')


class FloatCodec(Codec):
	def __init__(self, signed=False):
		self.signed = signed

	def decode(self, text):
		return parseDecimalFloat(text, self.signed)

	def format(self, value):
		return formatDecimalFloat(value)

	def check(self, value, key):
		if isinstance(value, bool) or not isinstance(value, (int, float)):
			raise InvalidInputError(repr(value), key + ' must be a number')
		# values whose text form would not read back (inf, nan, -1 unsigned)
		try:
			again = parseDecimalFloat(self.format(value), self.signed)
		except InvalidInputError:
			raise InvalidInputError(repr(value), key + ' has no decimal-floating-point form')
		if again != value:
			raise InvalidInputError(repr(value), key + ' does not survive formatting')


class QuotedCodec(Codec):
	quoted = True

	def __init__(self, pattern=None):
		self.pattern = re.compile(pattern) if pattern else None

	def decode(self, text):
		if self.pattern is not None and not self.pattern.fullmatch(text):
			raise InvalidInputError(text, 'unexpected quoted-string value')
		return text

	def format(self, value):
		return quote(value)

	def check(self, value, key):
		if not isinstance(value, str):
			raise InvalidInputError(repr(value), key + ' must be a string')
		for char in '"\r\n':
			if char in value:
				raise InvalidInputError(value, key + ' may not contain quotes or line breaks')
		if self.pattern is not None and not self.pattern.fullmatch(value):
			raise InvalidInputError(value, 'unexpected value for ' + key)


class QuotedOrNoneCodec(QuotedCodec):
	# quoted-string, or the bare enumerated-string NONE
	def parse(self, attributes, key):
		if not attributes.isQuoted(key):
			if attributes[key] != 'NONE':
				raise InvalidInputError(key + '=' + attributes[key], 'expected a quoted-string or NONE')
			return BareToken('NONE')
		return self.decode(attributes[key])

	def format(self, value):
		if isinstance(value, BareToken):
			return str(value)
		return quote(value)

	def check(self, value, key):
		if isinstance(value, BareToken):
			if value != 'NONE':
				raise InvalidInputError(value, key + ' only accepts the bare token NONE')
			return
		QuotedCodec.check(self, value, key)


class EnumCodec(Codec):
	def __init__(self, *values):
		self.values = values

	def decode(self, text):
		if text not in self.values:
			raise InvalidInputError(text, 'expected one of ' + ', '.join(self.values))
		return text

	def check(self, value, key):
		if value not in self.values:
			raise InvalidInputError(repr(value), key + ' must be one of ' + ', '.join(self.values))


class BooleanCodec(Codec):
	def decode(self, text):
		return parseBooleanToken(text)

	def format(self, value):
		return formatBooleanToken(value)

	def check(self, value, key):
		if not isinstance(value, bool):
			raise InvalidInputError(repr(value), key + ' must be True or False')


class HexCodec(Codec):
	_HEX = re.compile(r'0[xX][0-9A-Fa-f]+')

	def decode(self, text):
		if not self._HEX.fullmatch(text):
			raise InvalidInputError(text, 'not a hexadecimal-sequence')
		return text

	def check(self, value, key):
		if not isinstance(value, str) or not self._HEX.fullmatch(value):
			raise InvalidInputError(repr(value), key + ' must be a hexadecimal-sequence')


class ResolutionCodec(Codec):
	# WIDTHxHEIGHT, held as a (width, height) tuple
	def decode(self, text):
		width, sep, height = text.partition('x')
		if not sep:
			raise InvalidInputError(text, 'not a decimal-resolution')
		return (parseUnsignedInteger(width), parseUnsignedInteger(height))

	def format(self, value):
		return '%dx%d' % tuple(value)

	def check(self, value, key):
		if not isinstance(value, tuple) or len(value) != 2:
			raise InvalidInputError(repr(value), key + ' must be a (width, height) tuple')
		for number in value:
			IntegerCodec().check(number, key)


class ByteRangeCodec(Codec):
	# quoted "<n>[@<o>]", held as a (length, offset) tuple; offset may be None
	quoted = True

	def decode(self, text):
		return parseByteRange(text)

	def format(self, value):
		return quote(formatByteRange(*value))

	def check(self, value, key):
		if not isinstance(value, tuple) or len(value) != 2:
			raise InvalidInputError(repr(value), key + ' must be a (length, offset) tuple')
		IntegerCodec().check(value[0], key)
		if value[1] is not None:
			IntegerCodec().check(value[1], key)


INTEGER = IntegerCodec()
FLOAT = FloatCodec()
SIGNED_FLOAT = FloatCodec(signed=True)
QUOTED = QuotedCodec()
QUOTED_OR_NONE = QuotedOrNoneCodec()
BOOLEAN = BooleanCodec()
HEX = HexCodec()
RESOLUTION = ResolutionCodec()
BYTERANGE = ByteRangeCodec()

DATE_TIME_PATTERN = r'[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}(\.[0-9]+)?(Z|[+-][0-9]{2}(:?[0-9]{2})?)?'
DATE_TIME = QuotedCodec(DATE_TIME_PATTERN)
