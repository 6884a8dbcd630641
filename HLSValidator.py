####################################
#
# HLS Playlist Validator
#
# Parses a Master or Media playlist with the HLS Tag Toolkit and reports
# whether it is well formed and whether its EXT-X-VERSION covers the tags
# it uses.  The program can be run in command line, or batch mode where an
# input file is used to specify targets.
#
# Program Flow:
#   1) Get a playlist URL from the user (command or batch mode)
#   2) Retrieve playlist file from web server or disk
#   3) Validate the playlist file, and the variants a Master lists
#   4) Produce a report
#
# Running the Program:
#   >python HLSValidator.py batch <batch-file-name>
#   >python HLSValidator.py command <valid-URL>
#
####################################

import logging
import os
import sys
from urllib.parse import urljoin

import hlsConfig
from hlsErrors import FetchError
from hlsFetch import openURL
from hlsReport import buildReport, createPDF, failedFetchReport, screenPrint

USAGE = (
	"python HLSValidator.py <format: batch> <batch-file-name>",
	"python HLSValidator.py <format: command> <valid-URL>",
)


def validateURL(url, options=None, followVariants=True):
	# Fetch and validate one playlist.  The playlists a Master references
	# (variants, renditions, I-frame playlists) are fetched and validated as
	# well, one level deep.
	logging.info("++------------------------->> Entering validateURL: %s", url)
	text, valid, web = openURL(url)
	report = buildReport(url, text, valid, options)
	if followVariants and report.master:
		for variantURI in report.playlist.referencedURIs():
			variantURL = urljoin(url, variantURI)
			logging.info("++---------->> Found variant %s", variantURL)
			try:
				varText, varValid, varWeb = openURL(variantURL)
			except FetchError as e:
				variantReport = failedFetchReport(variantURL, e)
			else:
				variantReport = buildReport(variantURL, varText, varValid, options)
			report.variantReports.append(variantReport)
	logging.info("++------------------------->> Leaving validateURL")
	return report


def reportName(url):
	base = os.path.basename(url.rstrip('/')) or 'playlist'
	return os.path.splitext(base)[0] + '.pdf'


def runBatch(target, options=None):
	# target is either a playlist, or a text file listing one playlist per line
	logging.info("++---------->> Entered Batch mode:")
	text, valid, web = openURL(target)
	if valid:
		reports = [validateURL(target, options)]
	else:
		reports = []
		for line in text.splitlines():
			inputLine = line.strip()
			if not inputLine or inputLine.startswith('#'):
				continue
			try:
				reports.append(validateURL(inputLine, options))
			except FetchError as e:
				print("Error: ", e)
				logging.info("++---------->> Skipping %s: %s", inputLine, e)
	fileName = createPDF(reports, reportName(target))
	print('The name of the output file is: ', fileName)
	return all(report.passed for report in reports)


def runCommand(url, options=None, ask=input):
	logging.info("++---------->> Entered Command Line mode:")
	allPassed = True
	while True:
		try:
			report = validateURL(url, options)
		except FetchError as e:
			print("Error: ", e)
			logging.info("++---------->> %s", e)
			allPassed = False
		else:
			screenPrint(report)
			allPassed = allPassed and report.passed
		userResponse = ask("Enter the next valid URL -or- end: ")
		if userResponse == 'end':
			logging.info("<<----------++ Leaving Command Line mode:")
			return allPassed
		url = userResponse
		logging.info("++---------->> URL given: %s", userResponse)


def main(argv=None):
	if argv is None:
		argv = sys.argv[1:]
	if len(argv) < 2:
		for line in USAGE:
			print(line)
		return 2
	logging.basicConfig(filename=hlsConfig.LOG_FILE, level=hlsConfig.LOG_LEVEL)
	mode, target = argv[0], argv[1]
	logging.info("++-------->> File FORMAT: %s", mode)
	logging.info("++-------->> File File/URL: %s", target)
	try:
		if mode == "batch":
			passed = runBatch(target)
		elif mode == "command":
			passed = runCommand(target)
		else:
			print("++-------->> File FORMAT:", mode + " should be either command or batch")
			return 2
	except FetchError as e:
		print("Error: ", e)
		logging.info("++---------->> %s", e)
		return 1
	if passed:
		return 0
	return 1


def run():
	sys.exit(main())


if __name__ == "__main__":
	run()
