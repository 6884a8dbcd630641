####################################
#
# HLS Tag Toolkit - playlist assembler
#
# Program Flow:
#   1) Dispatch every line to a tag through the registry in hlsTags
#   2) Collect the entries, in source order, into a Playlist
#   3) Reconcile the declared EXT-X-VERSION with what the tags require
#   4) Check the structure (once-only tags, mixed tags, header)
#
# Checks are visitors: the Playlist accepts a Validator, and the
# Validator's visit() raises the first problem it finds.
#
####################################

import logging
from collections import namedtuple

import hlsConfig
from hlsErrors import (DuplicateTagError, HLSError, MissingHeaderError, MixedTagsError,
	UnknownTagError, VersionMismatchError)
from hlsTags import (SCOPE_ANY, SCOPE_MASTER, SCOPE_MEDIA, ExtM3u, ExtXIFrameStreamInf, ExtXMedia,
	ExtXVersion, ProtocolVersion, tagTypeFor)


class PlainLine(object):
	# A playlist entry that is not a registered tag; its text is kept as is
	__slots__ = ()
	ONCE = False
	SCOPE = SCOPE_ANY

	def toText(self):
		return self[0]

	def requiresVersion(self):
		return ProtocolVersion.lowest()

	def __str__(self):
		return self.toText()

	def __eq__(self, other):
		return type(self) is type(other) and tuple.__eq__(self, other)

	def __ne__(self, other):
		return not self == other

	def __hash__(self):
		return hash((type(self).__name__,) + tuple(self))


class UriLine(PlainLine, namedtuple('UriLine', 'uri')):
	# A media segment or variant playlist URI
	__slots__ = ()


class OpaqueTag(PlainLine, namedtuple('OpaqueTag', 'text')):
	# An #EXT line with no registered tag, kept verbatim
	__slots__ = ()


class Playlist(object):
	def __init__(self, entries=(), lineNumbers=None):
		self.entries = tuple(entries)
		if lineNumbers is None:
			lineNumbers = range(1, len(self.entries) + 1)
		self.lineNumbers = tuple(lineNumbers)

	def accept(self, validator):
		validator.visit(self)

	def numbered(self):
		return zip(self.entries, self.lineNumbers)

	def requiredVersion(self):
		version = ProtocolVersion.lowest()
		for entry in self.entries:
			version = max(version, entry.requiresVersion())
		return version

	requiresVersion = requiredVersion

	def declaredVersion(self):
		for entry in self.entries:
			if isinstance(entry, ExtXVersion):
				return ProtocolVersion(entry.version)
		return None

	def isMaster(self):
		for entry in self.entries:
			if entry.SCOPE == SCOPE_MASTER:
				return True
		return False

	def uris(self):
		return [entry.uri for entry in self.entries if isinstance(entry, UriLine)]

	def referencedURIs(self):
		# URI lines plus the URI attribute of renditions and I-frame playlists,
		# each once, in order of first appearance
		uris = []
		for entry in self.entries:
			if not isinstance(entry, (UriLine, ExtXMedia, ExtXIFrameStreamInf)):
				continue
			if entry.uri is not None and entry.uri not in uris:
				uris.append(entry.uri)
		return uris

	def toText(self):
		if not self.entries:
			return ''
		return '\n'.join(entry.toText() for entry in self.entries) + '\n'

	def __iter__(self):
		return iter(self.entries)

	def __len__(self):
		return len(self.entries)

	def __getitem__(self, index):
		return self.entries[index]

	def __eq__(self, other):
		return isinstance(other, Playlist) and self.entries == other.entries

	def __ne__(self, other):
		return not self == other

	__hash__ = None

	def __str__(self):
		return self.__class__.__name__

	def __repr__(self):
		return 'Playlist(%r)' % (list(self.entries),)


## This is where the visitors (check hierarchy) are defined

class Visitor(object):
	def __str__(self):
		return self.__class__.__name__


class Validator(Visitor):
	def visit(self, pList):
		raise NotImplementedError


def _atLine(error, lineNumber):
	error.lineNumber = lineNumber
	return error


class VersionCheck(Validator):
	#The first EXT-X-VERSION tag, if there is one, must cover the highest version
	#any tag in the playlist requires.
	def visit(self, pList):
		logging.info("++------------------------->> Beginning VersionCheck Validation")
		required = pList.requiredVersion()
		logging.info("++---------->> Required version = %s", required)
		for entry, lineNumber in pList.numbered():
			if isinstance(entry, ExtXVersion):
				declared = ProtocolVersion(entry.version)
				logging.info("++---------->> EXT-X-VERSION %s found on line %s", declared, lineNumber)
				if declared < required:
					logging.info("++---------->> VersionCheck Validation FAILED")
					raise _atLine(VersionMismatchError(declared, required), lineNumber)
				break
		logging.info("++------------------------->> Leaving VersionCheck Validation")


class StructureCheck(Validator):
	#One pass in line order over:
	#  - the #EXTM3U header, when requireHeader is set
	#  - tags that may appear only once
	#  - master playlist tags mixed with media playlist tags
	def __init__(self, requireHeader=False):
		self.requireHeader = requireHeader

	def visit(self, pList):
		logging.info("++------------------------->> Beginning StructureCheck Validation")
		if self.requireHeader:
			if not len(pList):
				raise MissingHeaderError('')
			if not isinstance(pList[0], ExtM3u):
				raise _atLine(MissingHeaderError(pList[0].toText()), pList.lineNumbers[0])
		seen = set()
		scope = None
		for entry, lineNumber in pList.numbered():
			kind = type(entry)
			if entry.ONCE:
				if kind in seen:
					logging.info("++---------->> Duplicate %s on line %s", kind.tagName(), lineNumber)
					raise _atLine(DuplicateTagError(kind.tagName()), lineNumber)
				seen.add(kind)
			if entry.SCOPE in (SCOPE_MEDIA, SCOPE_MASTER):
				if scope is None:
					scope = entry.SCOPE
				elif scope != entry.SCOPE:
					logging.info("++---------->> Mixed tags on line %s", lineNumber)
					raise _atLine(MixedTagsError(kind.tagName()), lineNumber)
		logging.info("++------------------------->> Leaving StructureCheck Validation")


def parseLine(line, options):
	# Returns the entry for one line, or None for blank and comment lines
	if not line.strip():
		return None
	if not line.startswith('#'):
		return UriLine(line)
	if not line.startswith('#EXT'):
		return None
	tagType = tagTypeFor(line)
	if tagType is not None:
		return tagType.fromText(line)
	if options.unknownTags == hlsConfig.UNKNOWN_REJECT:
		raise UnknownTagError(line)
	logging.info("++---------->> Keeping unknown tag: %s", line)
	return OpaqueTag(line)


def parsePlaylist(lines, options=None):
	logging.info("++------------------------->> Entering parsePlaylist")
	if options is None:
		options = hlsConfig.ParseOptions()
	if isinstance(lines, str):
		lines = lines.splitlines()
	entries = []
	lineNumbers = []
	for lineNumber, line in enumerate(lines, 1):
		line = line.rstrip('\r\n')
		if lineNumber == 1:
			# requests' .text keeps a UTF-8 byte-order mark
			line = line.lstrip('\ufeff')
		try:
			entry = parseLine(line, options)
		except HLSError as error:
			logging.info("++---------->> Line %s rejected: %s", lineNumber, error)
			raise _atLine(error, lineNumber)
		if entry is not None:
			entries.append(entry)
			lineNumbers.append(lineNumber)
	logging.info("++---------->> Collected %s entries", len(entries))
	playlist = Playlist(entries, lineNumbers)
	playlist.accept(VersionCheck())
	playlist.accept(StructureCheck(options.requireHeader))
	logging.info("++------------------------->> Leaving parsePlaylist")
	return playlist


def checkPlaylist(lines, options=None):
	# Same as parsePlaylist, but returns (playlist, None) or (None, error)
	try:
		return parsePlaylist(lines, options), None
	except HLSError as error:
		return None, error
