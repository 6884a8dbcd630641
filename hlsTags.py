####################################
#
# HLS Tag Toolkit - tag variants and the tag registry
#
# Every tag of RFC 8216 section 4.3 is a small immutable value built on a
# namedtuple.  Each variant knows its literal PREFIX, how to read itself from
# one line (fromText), how to write itself back (toText), and the lowest
# protocol version its current attribute values need (requiresVersion).
#
# The registry below is a tuple fixed at import time.  Dispatch tries the
# prefixes longest first, so #EXT-X-DISCONTINUITY-SEQUENCE: is tried before
# #EXT-X-DISCONTINUITY.
#
####################################

import logging
import re
from collections import namedtuple
from enum import IntEnum

import hlsAttributes as attr
from hlsAttributes import Attribute
from hlsErrors import (InvalidInputError, MissingAttributeError, UnexpectedAttributeError,
	UnknownTagError)
from hlsUtils import (formatAttributeList, formatByteRange, matchPrefix, parseAttributeList,
	parseByteRange, parseDecimalFloat, parseUnsignedInteger, quote)


class ProtocolVersion(IntEnum):
	# RFC 8216 section 7; ordering is by the integer rank
	V1 = 1
	V2 = 2
	V3 = 3
	V4 = 4
	V5 = 5
	V6 = 6
	V7 = 7

	@classmethod
	def lowest(cls):
		return min(cls)

	def __str__(self):
		return str(int(self))


# Which kind of playlist a tag may appear in
SCOPE_ANY = 'any'
SCOPE_MEDIA = 'media'
SCOPE_MASTER = 'master'


class Tag(object):
	__slots__ = ()
	PREFIX = None
	ONCE = False
	SCOPE = SCOPE_ANY

	def __new__(cls, *args, **kwargs):
		self = super(Tag, cls).__new__(cls, *args, **kwargs)
		self.validate()
		return self

	@classmethod
	def tagName(cls):
		return cls.PREFIX.lstrip('#').rstrip(':')

	@classmethod
	def fromText(cls, text):
		raise NotImplementedError

	def body(self):
		return ''

	def toText(self):
		return self.PREFIX + self.body()

	def requiresVersion(self):
		return ProtocolVersion.lowest()

	def validate(self):
		pass

	def _replace(self, **changes):
		# namedtuple's own _replace skips __new__ and with it validate()
		values = self._asdict()
		values.update(changes)
		return type(self)(**values)

	def __str__(self):
		return self.toText()

	# Same variant and same text, so EXTINF:10 and EXTINF:10.0 are different values
	def __eq__(self, other):
		return type(self) is type(other) and self.toText() == other.toText()

	def __ne__(self, other):
		return not self == other

	def __hash__(self):
		return hash((type(self).__name__, self.toText()))


class MarkerTag(Tag):
	# A tag whose whole text is its prefix
	__slots__ = ()

	@classmethod
	def fromText(cls, text):
		rest = matchPrefix(text, cls.PREFIX)
		if rest:
			raise InvalidInputError(text, 'unexpected text after ' + cls.PREFIX)
		return cls()


class IntegerTag(Tag):
	# PREFIX followed by a single decimal-integer
	__slots__ = ()

	@classmethod
	def fromText(cls, text):
		return cls(parseUnsignedInteger(matchPrefix(text, cls.PREFIX)))

	def body(self):
		return str(self[0])

	def validate(self):
		attr.INTEGER.check(self[0], self.tagName())


class AttributeTag(Tag):
	# PREFIX followed by an attribute-list described by ATTRIBUTES.  A tag with a
	# CLIENT_PREFIX also keeps client-defined attributes (X-...) in the
	# clientAttributes field as (key, value, quoted) triples, in source order.
	__slots__ = ()
	ATTRIBUTES = ()
	CLIENT_PREFIX = None
	_CLIENT_KEY = re.compile(r'[A-Z0-9-]+')
	_CLIENT_BARE_VALUE = re.compile(r'0[xX][0-9A-Fa-f]+|-?[0-9]+(\.[0-9]*)?')

	@classmethod
	def fromText(cls, text):
		attributes = parseAttributeList(matchPrefix(text, cls.PREFIX))
		known = set(attribute.key for attribute in cls.ATTRIBUTES)
		client = []
		for key in attributes:
			if key in known:
				continue
			if cls.CLIENT_PREFIX is None or not key.startswith(cls.CLIENT_PREFIX):
				raise UnexpectedAttributeError(key)
			client.append((key, attributes[key], attributes.isQuoted(key)))
		values = {}
		if client:
			values['clientAttributes'] = tuple(client)
		for attribute in cls.ATTRIBUTES:
			if attribute.key in attributes:
				values[attribute.field] = attribute.codec.parse(attributes, attribute.key)
			elif attribute.required:
				raise MissingAttributeError(attribute.key)
		return cls(**values)

	def body(self):
		pairs = []
		for attribute in self.ATTRIBUTES:
			value = getattr(self, attribute.field)
			if value is not None:
				pairs.append((attribute.key, attribute.codec.format(value)))
		for key, value, quoted in self.clientItems():
			pairs.append((key, quote(value) if quoted else value))
		return formatAttributeList(pairs)

	def clientItems(self):
		if self.CLIENT_PREFIX is None or self.clientAttributes is None:
			return ()
		return self.clientAttributes

	def validate(self):
		for attribute in self.ATTRIBUTES:
			value = getattr(self, attribute.field)
			if value is None:
				if attribute.required:
					raise MissingAttributeError(attribute.key)
			else:
				attribute.codec.check(value, attribute.key)
		if self.CLIENT_PREFIX is not None:
			self.checkClientAttributes()

	def checkClientAttributes(self):
		if self.clientAttributes is None:
			return
		if not isinstance(self.clientAttributes, tuple):
			raise InvalidInputError(repr(self.clientAttributes), 'clientAttributes must be a tuple')
		seen = set()
		for item in self.clientAttributes:
			if not isinstance(item, tuple) or len(item) != 3:
				raise InvalidInputError(repr(item), 'client attributes are (key, value, quoted) triples')
			key, value, quoted = item
			if not isinstance(key, str) or not key.startswith(self.CLIENT_PREFIX) \
					or not self._CLIENT_KEY.fullmatch(key[len(self.CLIENT_PREFIX):]):
				raise UnexpectedAttributeError(key)
			if key in seen:
				raise InvalidInputError(key, 'attribute repeated: ' + key)
			seen.add(key)
			if not isinstance(value, str):
				raise InvalidInputError(repr(value), key + ' must be a string')
			if quoted:
				attr.QUOTED.check(value, key)
			elif not self._CLIENT_BARE_VALUE.fullmatch(value):
				raise InvalidInputError(value, key + ' must be quoted, hexadecimal or decimal')

	def has(self, *fields):
		for field in fields:
			if getattr(self, field) is not None:
				return True
		return False


def _optional(typename, fields):
	return namedtuple(typename, fields, defaults=(None,) * len(fields.split()))


####################################
#
# Basic tags (RFC 8216 section 4.3.1)

class ExtM3u(MarkerTag, namedtuple('ExtM3u', ())):
	__slots__ = ()
	PREFIX = '#EXTM3U'
	ONCE = True


class ExtXVersion(Tag, namedtuple('ExtXVersion', 'version')):
	__slots__ = ()
	PREFIX = '#EXT-X-VERSION:'
	ONCE = True

	@classmethod
	def fromText(cls, text):
		number = parseUnsignedInteger(matchPrefix(text, cls.PREFIX))
		try:
			version = ProtocolVersion(number)
		except ValueError:
			raise InvalidInputError(text, 'unknown protocol version')
		return cls(version)

	def body(self):
		return '%d' % self.version

	def validate(self):
		if isinstance(self.version, bool) or self.version not in set(ProtocolVersion):
			raise InvalidInputError(repr(self.version), 'unknown protocol version')


####################################
#
# Media segment tags (RFC 8216 section 4.3.2)

class ExtInf(Tag, namedtuple('ExtInf', 'duration title', defaults=('',))):
	__slots__ = ()
	PREFIX = '#EXTINF:'
	SCOPE = SCOPE_MEDIA

	@classmethod
	def fromText(cls, text):
		duration, sep, title = matchPrefix(text, cls.PREFIX).partition(',')
		return cls(parseDecimalFloat(duration), title)

	def body(self):
		return attr.FLOAT.format(self.duration) + ',' + self.title

	def requiresVersion(self):
		# integer durations only before version 3
		if isinstance(self.duration, float):
			return ProtocolVersion.V3
		return ProtocolVersion.V1

	def validate(self):
		attr.FLOAT.check(self.duration, 'EXTINF duration')
		if not isinstance(self.title, str) or '\r' in self.title or '\n' in self.title:
			raise InvalidInputError(repr(self.title), 'EXTINF title must be a single line of text')


class ExtXByteRange(Tag, namedtuple('ExtXByteRange', 'length offset', defaults=(None,))):
	__slots__ = ()
	PREFIX = '#EXT-X-BYTERANGE:'
	SCOPE = SCOPE_MEDIA

	@classmethod
	def fromText(cls, text):
		return cls(*parseByteRange(matchPrefix(text, cls.PREFIX)))

	def body(self):
		return formatByteRange(self.length, self.offset)

	def requiresVersion(self):
		return ProtocolVersion.V4

	def validate(self):
		attr.INTEGER.check(self.length, 'EXT-X-BYTERANGE length')
		if self.offset is not None:
			attr.INTEGER.check(self.offset, 'EXT-X-BYTERANGE offset')


class ExtXDiscontinuity(MarkerTag, namedtuple('ExtXDiscontinuity', ())):
	__slots__ = ()
	PREFIX = '#EXT-X-DISCONTINUITY'
	SCOPE = SCOPE_MEDIA


KEY_ATTRIBUTES = (
	Attribute('METHOD', 'method', attr.EnumCodec('NONE', 'AES-128', 'SAMPLE-AES'), True),
	Attribute('URI', 'uri', attr.QUOTED, False),
	Attribute('IV', 'iv', attr.HEX, False),
	Attribute('KEYFORMAT', 'keyFormat', attr.QUOTED, False),
	Attribute('KEYFORMATVERSIONS', 'keyFormatVersions', attr.QuotedCodec(r'[0-9]+(/[0-9]+)*'), False),
)


class KeyTag(AttributeTag):
	# Shared rules of EXT-X-KEY and EXT-X-SESSION-KEY
	__slots__ = ()
	ATTRIBUTES = KEY_ATTRIBUTES

	def validate(self):
		AttributeTag.validate(self)
		if self.method == 'NONE':
			for attribute in self.ATTRIBUTES[1:]:
				if getattr(self, attribute.field) is not None:
					raise UnexpectedAttributeError(attribute.key)
		elif self.uri is None:
			raise MissingAttributeError('URI')

	def requiresVersion(self):
		if self.has('keyFormat', 'keyFormatVersions'):
			return ProtocolVersion.V5
		if self.has('iv'):
			return ProtocolVersion.V2
		return ProtocolVersion.V1


class ExtXKey(KeyTag, _optional('ExtXKey', 'method uri iv keyFormat keyFormatVersions')):
	__slots__ = ()
	PREFIX = '#EXT-X-KEY:'
	SCOPE = SCOPE_MEDIA


class ExtXMap(AttributeTag, _optional('ExtXMap', 'uri byteRange')):
	__slots__ = ()
	PREFIX = '#EXT-X-MAP:'
	SCOPE = SCOPE_MEDIA
	ATTRIBUTES = (
		Attribute('URI', 'uri', attr.QUOTED, True),
		Attribute('BYTERANGE', 'byteRange', attr.BYTERANGE, False),
	)

	def requiresVersion(self):
		return ProtocolVersion.V6


class ExtXProgramDateTime(Tag, namedtuple('ExtXProgramDateTime', 'dateTime')):
	__slots__ = ()
	PREFIX = '#EXT-X-PROGRAM-DATE-TIME:'
	SCOPE = SCOPE_MEDIA
	_DATE_TIME = re.compile(attr.DATE_TIME_PATTERN)

	@classmethod
	def fromText(cls, text):
		return cls(matchPrefix(text, cls.PREFIX))

	def body(self):
		return self.dateTime

	def validate(self):
		if not isinstance(self.dateTime, str) or not self._DATE_TIME.fullmatch(self.dateTime):
			raise InvalidInputError(repr(self.dateTime), 'not an ISO 8601 date-time')


class ExtXDateRange(AttributeTag, _optional('ExtXDateRange',
		'id rangeClass startDate endDate duration plannedDuration scte35Cmd scte35Out scte35In endOnNext '
		'clientAttributes')):
	__slots__ = ()
	PREFIX = '#EXT-X-DATERANGE:'
	SCOPE = SCOPE_MEDIA
	CLIENT_PREFIX = 'X-'
	ATTRIBUTES = (
		Attribute('ID', 'id', attr.QUOTED, True),
		Attribute('CLASS', 'rangeClass', attr.QUOTED, False),
		Attribute('START-DATE', 'startDate', attr.DATE_TIME, True),
		Attribute('END-DATE', 'endDate', attr.DATE_TIME, False),
		Attribute('DURATION', 'duration', attr.FLOAT, False),
		Attribute('PLANNED-DURATION', 'plannedDuration', attr.FLOAT, False),
		Attribute('SCTE35-CMD', 'scte35Cmd', attr.HEX, False),
		Attribute('SCTE35-OUT', 'scte35Out', attr.HEX, False),
		Attribute('SCTE35-IN', 'scte35In', attr.HEX, False),
		Attribute('END-ON-NEXT', 'endOnNext', attr.EnumCodec('YES'), False),
	)

	def validate(self):
		AttributeTag.validate(self)
		if self.endOnNext is not None:
			if self.rangeClass is None:
				raise MissingAttributeError('CLASS')
			if self.duration is not None:
				raise UnexpectedAttributeError('DURATION')
			if self.endDate is not None:
				raise UnexpectedAttributeError('END-DATE')


####################################
#
# Media playlist tags (RFC 8216 section 4.3.3)

class ExtXTargetDuration(IntegerTag, namedtuple('ExtXTargetDuration', 'duration')):
	__slots__ = ()
	PREFIX = '#EXT-X-TARGETDURATION:'
	ONCE = True
	SCOPE = SCOPE_MEDIA


class ExtXMediaSequence(IntegerTag, namedtuple('ExtXMediaSequence', 'number')):
	__slots__ = ()
	PREFIX = '#EXT-X-MEDIA-SEQUENCE:'
	ONCE = True
	SCOPE = SCOPE_MEDIA


class ExtXDiscontinuitySequence(IntegerTag, namedtuple('ExtXDiscontinuitySequence', 'number')):
	__slots__ = ()
	PREFIX = '#EXT-X-DISCONTINUITY-SEQUENCE:'
	ONCE = True
	SCOPE = SCOPE_MEDIA


class ExtXEndList(MarkerTag, namedtuple('ExtXEndList', ())):
	__slots__ = ()
	PREFIX = '#EXT-X-ENDLIST'
	ONCE = True
	SCOPE = SCOPE_MEDIA


class ExtXPlaylistType(Tag, namedtuple('ExtXPlaylistType', 'playlistType')):
	__slots__ = ()
	PREFIX = '#EXT-X-PLAYLIST-TYPE:'
	ONCE = True
	SCOPE = SCOPE_MEDIA
	_TYPES = attr.EnumCodec('EVENT', 'VOD')

	@classmethod
	def fromText(cls, text):
		return cls(cls._TYPES.decode(matchPrefix(text, cls.PREFIX)))

	def body(self):
		return self.playlistType

	def validate(self):
		self._TYPES.check(self.playlistType, 'EXT-X-PLAYLIST-TYPE')


class ExtXIFramesOnly(MarkerTag, namedtuple('ExtXIFramesOnly', ())):
	__slots__ = ()
	PREFIX = '#EXT-X-I-FRAMES-ONLY'
	ONCE = True
	SCOPE = SCOPE_MEDIA

	def requiresVersion(self):
		return ProtocolVersion.V4


####################################
#
# Master playlist tags (RFC 8216 section 4.3.4)

class ExtXMedia(AttributeTag, _optional('ExtXMedia',
		'mediaType uri groupId language assocLanguage name default autoSelect forced '
		'instreamId characteristics channels')):
	__slots__ = ()
	PREFIX = '#EXT-X-MEDIA:'
	SCOPE = SCOPE_MASTER
	ATTRIBUTES = (
		Attribute('TYPE', 'mediaType', attr.EnumCodec('AUDIO', 'VIDEO', 'SUBTITLES', 'CLOSED-CAPTIONS'), True),
		Attribute('URI', 'uri', attr.QUOTED, False),
		Attribute('GROUP-ID', 'groupId', attr.QUOTED, True),
		Attribute('LANGUAGE', 'language', attr.QUOTED, False),
		Attribute('ASSOC-LANGUAGE', 'assocLanguage', attr.QUOTED, False),
		Attribute('NAME', 'name', attr.QUOTED, True),
		Attribute('DEFAULT', 'default', attr.BOOLEAN, False),
		Attribute('AUTOSELECT', 'autoSelect', attr.BOOLEAN, False),
		Attribute('FORCED', 'forced', attr.BOOLEAN, False),
		Attribute('INSTREAM-ID', 'instreamId', attr.QuotedCodec(r'CC[1-4]|SERVICE([1-9]|[1-5][0-9]|6[0-3])'), False),
		Attribute('CHARACTERISTICS', 'characteristics', attr.QUOTED, False),
		Attribute('CHANNELS', 'channels', attr.QUOTED, False),
	)

	def validate(self):
		AttributeTag.validate(self)
		if self.mediaType == 'CLOSED-CAPTIONS':
			if self.instreamId is None:
				raise MissingAttributeError('INSTREAM-ID')
			if self.uri is not None:
				raise UnexpectedAttributeError('URI')
		elif self.instreamId is not None:
			raise UnexpectedAttributeError('INSTREAM-ID')
		if self.forced is not None and self.mediaType != 'SUBTITLES':
			raise UnexpectedAttributeError('FORCED')
		if self.default and self.autoSelect is False:
			raise InvalidInputError(self.toText(), 'DEFAULT=YES needs AUTOSELECT=YES')

	def requiresVersion(self):
		if self.instreamId is not None and self.instreamId.startswith('SERVICE'):
			return ProtocolVersion.V7
		return ProtocolVersion.V1


HDCP_LEVEL = attr.EnumCodec('TYPE-0', 'TYPE-1', 'NONE')


class ExtXStreamInf(AttributeTag, _optional('ExtXStreamInf',
		'bandwidth averageBandwidth codecs resolution frameRate hdcpLevel audio video '
		'subtitles closedCaptions programId')):
	__slots__ = ()
	PREFIX = '#EXT-X-STREAM-INF:'
	SCOPE = SCOPE_MASTER
	ATTRIBUTES = (
		Attribute('BANDWIDTH', 'bandwidth', attr.INTEGER, True),
		Attribute('AVERAGE-BANDWIDTH', 'averageBandwidth', attr.INTEGER, False),
		Attribute('CODECS', 'codecs', attr.QUOTED, False),
		Attribute('RESOLUTION', 'resolution', attr.RESOLUTION, False),
		Attribute('FRAME-RATE', 'frameRate', attr.FLOAT, False),
		Attribute('HDCP-LEVEL', 'hdcpLevel', HDCP_LEVEL, False),
		Attribute('AUDIO', 'audio', attr.QUOTED, False),
		Attribute('VIDEO', 'video', attr.QUOTED, False),
		Attribute('SUBTITLES', 'subtitles', attr.QUOTED, False),
		Attribute('CLOSED-CAPTIONS', 'closedCaptions', attr.QUOTED_OR_NONE, False),
		# legacy, removed from the protocol in version 6
		Attribute('PROGRAM-ID', 'programId', attr.INTEGER, False),
	)


class ExtXIFrameStreamInf(AttributeTag, _optional('ExtXIFrameStreamInf',
		'uri bandwidth averageBandwidth codecs resolution hdcpLevel video programId')):
	__slots__ = ()
	PREFIX = '#EXT-X-I-FRAME-STREAM-INF:'
	SCOPE = SCOPE_MASTER
	ATTRIBUTES = (
		Attribute('URI', 'uri', attr.QUOTED, True),
		Attribute('BANDWIDTH', 'bandwidth', attr.INTEGER, True),
		Attribute('AVERAGE-BANDWIDTH', 'averageBandwidth', attr.INTEGER, False),
		Attribute('CODECS', 'codecs', attr.QUOTED, False),
		Attribute('RESOLUTION', 'resolution', attr.RESOLUTION, False),
		Attribute('HDCP-LEVEL', 'hdcpLevel', HDCP_LEVEL, False),
		Attribute('VIDEO', 'video', attr.QUOTED, False),
		Attribute('PROGRAM-ID', 'programId', attr.INTEGER, False),
	)


class ExtXSessionData(AttributeTag, _optional('ExtXSessionData', 'dataId value uri language')):
	__slots__ = ()
	PREFIX = '#EXT-X-SESSION-DATA:'
	SCOPE = SCOPE_MASTER
	ATTRIBUTES = (
		Attribute('DATA-ID', 'dataId', attr.QUOTED, True),
		Attribute('VALUE', 'value', attr.QUOTED, False),
		Attribute('URI', 'uri', attr.QUOTED, False),
		Attribute('LANGUAGE', 'language', attr.QUOTED, False),
	)

	def validate(self):
		# exactly one of VALUE and URI
		AttributeTag.validate(self)
		if self.value is None and self.uri is None:
			raise MissingAttributeError('VALUE')
		if self.value is not None and self.uri is not None:
			raise UnexpectedAttributeError('URI')


class ExtXSessionKey(KeyTag, _optional('ExtXSessionKey', 'method uri iv keyFormat keyFormatVersions')):
	__slots__ = ()
	PREFIX = '#EXT-X-SESSION-KEY:'
	SCOPE = SCOPE_MASTER

	def validate(self):
		KeyTag.validate(self)
		if self.method == 'NONE':
			raise InvalidInputError('METHOD=NONE', 'EXT-X-SESSION-KEY needs an encryption method')


####################################
#
# Media or master playlist tags (RFC 8216 section 4.3.5)

class ExtXIndependentSegments(MarkerTag, namedtuple('ExtXIndependentSegments', ())):
	__slots__ = ()
	PREFIX = '#EXT-X-INDEPENDENT-SEGMENTS'
	ONCE = True


class ExtXStart(AttributeTag, _optional('ExtXStart', 'timeOffset precise')):
	__slots__ = ()
	PREFIX = '#EXT-X-START:'
	ONCE = True
	ATTRIBUTES = (
		Attribute('TIME-OFFSET', 'timeOffset', attr.SIGNED_FLOAT, True),
		Attribute('PRECISE', 'precise', attr.BOOLEAN, False),
	)


####################################
#
# The registry

TAG_TYPES = (
	ExtM3u, ExtXVersion,
	ExtInf, ExtXByteRange, ExtXDiscontinuity, ExtXKey, ExtXMap, ExtXProgramDateTime, ExtXDateRange,
	ExtXTargetDuration, ExtXMediaSequence, ExtXDiscontinuitySequence, ExtXEndList,
	ExtXPlaylistType, ExtXIFramesOnly,
	ExtXMedia, ExtXStreamInf, ExtXIFrameStreamInf, ExtXSessionData, ExtXSessionKey,
	ExtXIndependentSegments, ExtXStart,
)

# Longest prefix first; sorted() is stable so equal lengths keep TAG_TYPES order.
TAG_REGISTRY = tuple(sorted(TAG_TYPES, key=lambda tagType: len(tagType.PREFIX), reverse=True))


def tagTypeFor(line):
	for tagType in TAG_REGISTRY:
		if line.startswith(tagType.PREFIX):
			return tagType
	return None


def parse(text):
	tagType = tagTypeFor(text)
	if tagType is None:
		raise UnknownTagError(text)
	logging.debug("++---------->> parse: %s as %s", text, tagType.__name__)
	return tagType.fromText(text)


def toText(tag):
	return tag.toText()


def requiresVersion(item):
	# works for a single tag or for a whole hlsPlaylist.Playlist
	return item.requiresVersion()
