####################################
#
# HLS Tag Toolkit - settings
#
# Defaults for the playlist assembler and the command line program.
#
####################################

import logging

LOG_FILE = 'HLSValidator.log'
LOG_LEVEL = logging.INFO

# What the assembler does with an #EXT line no registered tag matches
UNKNOWN_PRESERVE = 'preserve'
UNKNOWN_REJECT = 'reject'
UNKNOWN_TAGS = UNKNOWN_PRESERVE

# When True the first playlist entry must be #EXTM3U
REQUIRE_HEADER = False

# Extensions and content types that mark a resource as a playlist
PLAYLIST_EXTENSIONS = ('.m3u8', '.m3u')
PLAYLIST_CONTENT_TYPES = ('application/vnd.apple.mpegurl', 'audio/mpegurl', 'application/x-mpegurl')

REQUEST_TIMEOUT = 10  #seconds


class ParseOptions(object):
	def __init__(self, unknownTags=None, requireHeader=None):
		if unknownTags is None:
			unknownTags = UNKNOWN_TAGS
		if requireHeader is None:
			requireHeader = REQUIRE_HEADER
		if unknownTags not in (UNKNOWN_PRESERVE, UNKNOWN_REJECT):
			raise ValueError('unknownTags must be %r or %r' % (UNKNOWN_PRESERVE, UNKNOWN_REJECT))
		self.unknownTags = unknownTags
		self.requireHeader = requireHeader

	def __repr__(self):
		return 'ParseOptions(unknownTags=%r, requireHeader=%r)' % (self.unknownTags, self.requireHeader)
