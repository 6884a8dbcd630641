####################################
#
# HLS Tag Toolkit - validation reports
#
# A ValidationReport holds the PASSED/FAILED lines for one playlist and the
# reports of the variant playlists a master playlist lists.  It is printed to
# the screen in command mode and written to a PDF in batch mode.
#
####################################

import logging
from xml.sax.saxutils import escape

from reportlab.lib.colors import blue
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from hlsErrors import (DuplicateTagError, MissingHeaderError, MixedTagsError,
	VersionMismatchError)
from hlsPlaylist import checkPlaylist

# section title -> the errors that fail it
CHECKS = (
	('TAG SYNTAX CHECK', None),
	('VERSION CHECK', (VersionMismatchError,)),
	('STRUCTURE CHECK', (DuplicateTagError, MixedTagsError, MissingHeaderError)),
)


class ValidationReport(object):
	def __init__(self, suppliedURL, valid=True):
		self.suppliedURL = suppliedURL
		self.valid = valid        #Whether the URL/content type looked like a playlist
		self.playlist = None
		self.error = None
		self.checkResults = []
		self.variantReports = []

	@property
	def master(self):
		return self.playlist is not None and self.playlist.isMaster()

	@property
	def passed(self):
		if self.error is not None:
			return False
		for variant in self.variantReports:
			if not variant.passed:
				return False
		return True

	def headerLines(self):
		return [
			'<<##--------------------- Report ------------------------##>>',
			'The valid m3u8 check for the URL was: ' + str(self.valid),
			'The playlist was a Master = ' + str(self.master),
			'The given URL was = ' + str(self.suppliedURL),
		]


def _failedSection(error):
	for title, errorTypes in CHECKS[1:]:
		if isinstance(error, errorTypes):
			return title
	return CHECKS[0][0]


def buildReport(url, text, valid=True, options=None):
	logging.info("++------------------------->> Entering buildReport for %s", url)
	report = ValidationReport(url, valid)
	playlist, error = checkPlaylist(text, options)
	report.playlist = playlist
	report.error = error
	failed = _failedSection(error) if error is not None else None
	reached = True
	for title, _errorTypes in CHECKS:
		report.checkResults.append('-----<<' + title + '>>-----')
		if title == failed:
			report.checkResults.append('FAILED: ' + str(error))
			reached = False
		elif reached:
			report.checkResults.append('PASSED')
		else:
			report.checkResults.append('NOT RUN')
	if playlist is not None:
		report.checkResults.append('Required version = ' + str(playlist.requiredVersion()))
		declared = playlist.declaredVersion()
		report.checkResults.append('Declared version = ' + (str(declared) if declared else 'none'))
	logging.info("++------------------------->> Leaving buildReport, passed = %s", report.passed)
	return report


def failedFetchReport(url, error):
	# A playlist that could not be opened; none of its checks ran
	logging.info("++---------->> No checks run for %s: %s", url, error)
	report = ValidationReport(url, False)
	report.error = error
	report.checkResults.append('FAILED: ' + str(error))
	for title, _errorTypes in CHECKS:
		report.checkResults.append('-----<<' + title + '>>-----')
		report.checkResults.append('NOT RUN')
	return report


####################################
#
# This function is used to print out the report to the screen
def screenPrint(report):
	for line in report.headerLines():
		print(line)
	print('')
	for line in report.checkResults:
		print(line)
	if report.variantReports:
		print('')
		print('Variant List:')
		for variant in report.variantReports:
			print('')
			print(variant.suppliedURL)
			for line in variant.checkResults:
				print('\t', line)
	print('')


####################################
#
# PDF output for batch mode
styles = getSampleStyleSheet()


def myFirstPage(canvas, doc):
	canvas.saveState()
	canvas.setFont('Times-Roman', 9)
	canvas.drawString(inch, 0.75 * inch, "First Page / Validation Report")
	canvas.restoreState()


def myLaterPages(canvas, doc):
	canvas.saveState()
	canvas.setFont('Times-Roman', 9)
	canvas.drawString(inch, 0.75 * inch, "Page %d Validation Report" % doc.page)
	canvas.restoreState()


def reportStory(report, style):
	story = []
	for line in report.headerLines() + report.checkResults:
		story.append(Paragraph(escape(line), style))
		story.append(Spacer(1, 0.1 * inch))
	if report.variantReports:
		story.append(Spacer(1, 0.2 * inch))
		story.append(Paragraph('Variant List:', style))
		for variant in report.variantReports:
			story.append(Spacer(1, 0.2 * inch))
			story.extend(reportStory(variant, style))
	return story


def createPDF(reports, fileName):
	logging.info("++------------------------->> Writing PDF report %s", fileName)
	doc = SimpleDocTemplate(fileName)
	style = styles["Normal"]
	style.textColor = blue
	story = []
	for report in reports:
		story.extend(reportStory(report, style))
		story.append(Spacer(1, 0.4 * inch))
	doc.build(story, onFirstPage=myFirstPage, onLaterPages=myLaterPages)
	return fileName
