import pytest

import hlsConfig

MEDIA_PLAYLIST = (
	'#EXTM3U\n'
	'#EXT-X-VERSION:3\n'
	'#EXT-X-TARGETDURATION:10\n'
	'#EXT-X-MEDIA-SEQUENCE:0\n'
	'#EXT-X-PLAYLIST-TYPE:VOD\n'
	'#EXTINF:9.009,\n'
	'segment0.ts\n'
	'#EXTINF:9.009,\n'
	'segment1.ts\n'
	'#EXTINF:3.003,\n'
	'segment2.ts\n'
	'#EXT-X-ENDLIST\n'
)

MASTER_PLAYLIST = (
	'#EXTM3U\n'
	'#EXT-X-VERSION:7\n'
	'#EXT-X-INDEPENDENT-SEGMENTS\n'
	'#EXT-X-MEDIA:TYPE=CLOSED-CAPTIONS,GROUP-ID="cc",NAME="English",LANGUAGE="en",INSTREAM-ID="SERVICE1"\n'
	'#EXT-X-MEDIA:TYPE=AUDIO,GROUP-ID="aud",NAME="English",LANGUAGE="en",DEFAULT=YES,AUTOSELECT=YES,URI="audio/en.m3u8"\n'
	'#EXT-X-STREAM-INF:BANDWIDTH=1280000,AVERAGE-BANDWIDTH=1000000,CODECS="avc1.4d401f,mp4a.40.2",'
	'RESOLUTION=1280x720,AUDIO="aud",CLOSED-CAPTIONS="cc"\n'
	'low/index.m3u8\n'
	'#EXT-X-STREAM-INF:BANDWIDTH=2560000,RESOLUTION=1920x1080,CLOSED-CAPTIONS=NONE\n'
	'high/index.m3u8\n'
)


@pytest.fixture()
def mediaPlaylistText():
	"""A small VOD media playlist with fractional EXTINF durations."""
	return MEDIA_PLAYLIST


@pytest.fixture()
def masterPlaylistText():
	"""A master playlist with two variants and a version 7 closed caption rendition."""
	return MASTER_PLAYLIST


@pytest.fixture()
def logFile(tmp_path, monkeypatch):
	path = tmp_path / 'HLSValidator.log'
	monkeypatch.setattr(hlsConfig, 'LOG_FILE', str(path))
	return path
