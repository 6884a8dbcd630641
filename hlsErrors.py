####################################
#
# HLS Tag Toolkit - error hierarchy
#
# Every failure raised by the tag and playlist modules derives from
# HLSError.  The playlist assembler adds the 1-based lineNumber of the
# line it was working on when the error surfaced.
#
####################################

class HLSError(Exception):
	lineNumber = None

	def __str__(self):
		message = self.describe()
		if self.lineNumber is not None:
			message = message + ' (line ' + str(self.lineNumber) + ')'
		return message

	def describe(self):
		return self.__class__.__name__


class InvalidInputError(HLSError):
	# context is the offending substring, cause the reason it was rejected
	def __init__(self, context, cause=None):
		HLSError.__init__(self, context, cause)
		self.context = context
		self.cause = cause

	def describe(self):
		if self.cause is None:
			return 'Invalid input: %r' % (self.context,)
		return 'Invalid input: %r (%s)' % (self.context, self.cause)


class UnmatchedPrefixError(HLSError):
	def __init__(self, expected, actual):
		HLSError.__init__(self, expected, actual)
		self.expected = expected
		self.actual = actual

	def describe(self):
		return 'Expected a line starting with %r, got %r' % (self.expected, self.actual)


class MissingAttributeError(HLSError):
	def __init__(self, name):
		HLSError.__init__(self, name)
		self.name = name

	def describe(self):
		return 'Missing required attribute: ' + self.name


class UnexpectedAttributeError(HLSError):
	def __init__(self, name):
		HLSError.__init__(self, name)
		self.name = name

	def describe(self):
		return 'Unexpected attribute: ' + self.name


class VersionMismatchError(HLSError):
	def __init__(self, declared, required):
		HLSError.__init__(self, declared, required)
		self.declared = declared
		self.required = required

	def describe(self):
		return 'EXT-X-VERSION declares %d but the tags require %d' % (self.declared, self.required)


class DuplicateTagError(HLSError):
	def __init__(self, name):
		HLSError.__init__(self, name)
		self.name = name

	def describe(self):
		return 'Tag may appear only once: ' + self.name


class UnknownTagError(HLSError):
	def __init__(self, line):
		HLSError.__init__(self, line)
		self.line = line

	def describe(self):
		return 'Unknown tag: %r' % (self.line,)


class MixedTagsError(HLSError):
	# master playlist tags and media playlist tags in one file
	def __init__(self, name):
		HLSError.__init__(self, name)
		self.name = name

	def describe(self):
		return 'Master and media playlist tags mixed at ' + self.name


class MissingHeaderError(HLSError):
	def __init__(self, line):
		HLSError.__init__(self, line)
		self.line = line

	def describe(self):
		return 'First line should start with #EXTM3U, got %r' % (self.line,)


class FetchError(HLSError):
	def __init__(self, url, cause):
		HLSError.__init__(self, url, cause)
		self.url = url
		self.cause = cause

	def describe(self):
		return 'Could not open %s: %s' % (self.url, self.cause)
