####################################
#
# HLS Tag Toolkit - opening a playlist from the web or from disk
#
####################################

import logging

import requests

import hlsConfig
from hlsErrors import FetchError


def looksLikePlaylist(url, contentType=None):
	# valid = whether the URL or content type marks the resource as a playlist
	if url.endswith(hlsConfig.PLAYLIST_EXTENSIONS):
		return True
	if contentType is not None:
		return contentType.split(';')[0].strip().lower() in hlsConfig.PLAYLIST_CONTENT_TYPES
	return False


def openURL(url):
	# Returns (text, valid, web).  web is True when the text came over http(s).
	logging.info("++----------------------------------->> Entering openURL")
	logging.info("++---------->> Passed in URL: %s", url)
	valid = looksLikePlaylist(url)
	if url.startswith("http://") or url.startswith("https://"):
		logging.info("++---------->> Attempting openURL using http")
		try:
			response = requests.get(url, timeout=hlsConfig.REQUEST_TIMEOUT)
			response.raise_for_status()
		except requests.exceptions.RequestException as e:
			logging.info("++---------->> openURL Error: %s", e)
			raise FetchError(url, e)
		if not valid:
			valid = looksLikePlaylist(url, response.headers.get('content-type'))
			logging.info("++---------->> openURL Valid via content-type= %s", valid)
		logging.info("++---------->> The returned valid= %s", valid)
		return response.text, valid, True
	try:
		logging.info("++---------->> Attempting openURL using file-handle")
		with open(url, 'r', encoding='utf-8-sig') as fileHandle:
			text = fileHandle.read()
	except OSError as e:
		logging.info("++---------->> openURL OSError: %s", e)
		raise FetchError(url, e)
	logging.info("++---------->> The returned valid= %s", valid)
	return text, valid, False
