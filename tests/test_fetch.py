import pytest
import requests

import hlsFetch
from hlsConfig import ParseOptions
from hlsErrors import FetchError
from hlsFetch import looksLikePlaylist, openURL
from hlsPlaylist import parsePlaylist
from hlsTags import ExtM3u


class FakeResponse(object):
	def __init__(self, text, contentType=None, status=200):
		self.text = text
		self.headers = {}
		if contentType is not None:
			self.headers['content-type'] = contentType
		self.status = status

	def raise_for_status(self):
		if self.status >= 400:
			raise requests.exceptions.HTTPError('%d error' % self.status)


def test_looks_like_playlist():
	assert looksLikePlaylist('http://example.com/live.m3u8')
	assert looksLikePlaylist('list.m3u')
	assert not looksLikePlaylist('list.txt')
	assert looksLikePlaylist('http://example.com/live', 'application/vnd.apple.mpegurl; charset=utf-8')
	assert not looksLikePlaylist('http://example.com/live', 'text/html')


def test_open_local_file(tmp_path, mediaPlaylistText):
	path = tmp_path / 'index.m3u8'
	path.write_text(mediaPlaylistText, encoding='utf-8')
	text, valid, web = openURL(str(path))
	assert text == mediaPlaylistText
	assert valid is True
	assert web is False


def test_open_local_file_with_byte_order_mark(tmp_path, mediaPlaylistText):
	path = tmp_path / 'index.m3u8'
	path.write_bytes(b'\xef\xbb\xbf' + mediaPlaylistText.encode('utf-8'))
	text, valid, web = openURL(str(path))
	assert text == mediaPlaylistText
	playlist = parsePlaylist(text, ParseOptions(requireHeader=True))
	assert playlist[0] == ExtM3u()


def test_open_missing_file(tmp_path):
	with pytest.raises(FetchError) as excinfo:
		openURL(str(tmp_path / 'missing.m3u8'))
	assert isinstance(excinfo.value.cause, OSError)


def test_open_web_playlist(monkeypatch, mediaPlaylistText):
	calls = []

	def fakeGet(url, timeout=None):
		calls.append((url, timeout))
		return FakeResponse(mediaPlaylistText, 'application/vnd.apple.mpegurl')

	monkeypatch.setattr(hlsFetch.requests, 'get', fakeGet)
	text, valid, web = openURL('https://example.com/stream')
	assert text == mediaPlaylistText
	assert valid is True
	assert web is True
	assert calls == [('https://example.com/stream', hlsFetch.hlsConfig.REQUEST_TIMEOUT)]


def test_open_web_error(monkeypatch):
	monkeypatch.setattr(hlsFetch.requests, 'get', lambda url, timeout=None: FakeResponse('', status=404))
	with pytest.raises(FetchError) as excinfo:
		openURL('http://example.com/index.m3u8')
	assert excinfo.value.url == 'http://example.com/index.m3u8'


def test_open_web_connection_error(monkeypatch):
	def fakeGet(url, timeout=None):
		raise requests.exceptions.ConnectionError('refused')

	monkeypatch.setattr(hlsFetch.requests, 'get', fakeGet)
	with pytest.raises(FetchError):
		openURL('http://example.com/index.m3u8')
