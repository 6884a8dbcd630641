import pytest

from hlsAttributes import BareToken
from hlsErrors import (InvalidInputError, MissingAttributeError, UnexpectedAttributeError,
	UnknownTagError, UnmatchedPrefixError)
from hlsTags import (TAG_REGISTRY, TAG_TYPES, ExtInf, ExtM3u, ExtXByteRange, ExtXDateRange,
	ExtXDiscontinuity, ExtXDiscontinuitySequence, ExtXEndList, ExtXIFramesOnly, ExtXKey, ExtXMap,
	ExtXMedia, ExtXMediaSequence, ExtXPlaylistType, ExtXSessionData, ExtXSessionKey, ExtXStart,
	ExtXStreamInf, ExtXTargetDuration, ExtXVersion, ProtocolVersion, parse, requiresVersion, toText)

# One line per registered tag, attributes in the order the tag writes them
EXAMPLE_LINES = [
	'#EXTM3U',
	'#EXT-X-VERSION:4',
	'#EXTINF:10,Title, with comma',
	'#EXTINF:9.009,',
	'#EXTINF:0.00001,',
	'#EXT-X-BYTERANGE:1024@2048',
	'#EXT-X-BYTERANGE:1024',
	'#EXT-X-DISCONTINUITY',
	'#EXT-X-KEY:METHOD=AES-128,URI="https://example.com/key",IV=0x1f2e3d4c5b6a79880102030405060708',
	'#EXT-X-KEY:METHOD=NONE',
	'#EXT-X-MAP:URI="init.mp4",BYTERANGE="720@0"',
	'#EXT-X-PROGRAM-DATE-TIME:2010-02-19T14:54:23.031+08:00',
	'#EXT-X-DATERANGE:ID="ad1",CLASS="com.example.ad",START-DATE="2014-03-05T11:15:00Z",DURATION=59.993,SCTE35-OUT=0xFC002F',
	'#EXT-X-DATERANGE:ID="a",START-DATE="2014-03-05T11:15:00Z",X-COM-EXAMPLE-AD-ID="XYZ123",X-COM-EXAMPLE-OFFSET=-1.5',
	'#EXT-X-TARGETDURATION:10',
	'#EXT-X-MEDIA-SEQUENCE:2680',
	'#EXT-X-DISCONTINUITY-SEQUENCE:4',
	'#EXT-X-ENDLIST',
	'#EXT-X-PLAYLIST-TYPE:EVENT',
	'#EXT-X-I-FRAMES-ONLY',
	'#EXT-X-MEDIA:TYPE=AUDIO,URI="eng/prog_index.m3u8",GROUP-ID="aac",LANGUAGE="en",NAME="English",DEFAULT=YES,AUTOSELECT=YES',
	'#EXT-X-STREAM-INF:BANDWIDTH=1280000,CODECS="avc1.4d401f,mp4a.40.2",RESOLUTION=1280x720,FRAME-RATE=29.97',
	'#EXT-X-STREAM-INF:BANDWIDTH=2560000,CLOSED-CAPTIONS=NONE',
	'#EXT-X-I-FRAME-STREAM-INF:URI="iframe.m3u8",BANDWIDTH=86000,CODECS="avc1.4d001f"',
	'#EXT-X-SESSION-DATA:DATA-ID="com.example.title",VALUE="This is an example",LANGUAGE="en"',
	'#EXT-X-SESSION-KEY:METHOD=SAMPLE-AES,URI="skd://key",KEYFORMAT="com.apple.streamingkeydelivery",KEYFORMATVERSIONS="1"',
	'#EXT-X-INDEPENDENT-SEGMENTS',
	'#EXT-X-START:TIME-OFFSET=-12.5,PRECISE=YES',
	'#EXT-X-START:TIME-OFFSET=-0.00005',
]


@pytest.mark.parametrize('line', EXAMPLE_LINES)
def test_example_lines_round_trip(line):
	tag = parse(line)
	assert toText(tag) == line
	assert parse(toText(tag)) == tag


def test_every_registered_tag_has_an_example():
	covered = set(type(parse(line)) for line in EXAMPLE_LINES)
	assert covered == set(TAG_TYPES)


def test_ext_x_endlist():
	tag = ExtXEndList()
	text = '#EXT-X-ENDLIST'
	assert parse(text) == tag
	assert ExtXEndList.fromText(text) == tag
	assert tag.toText() == text
	assert str(tag) == text
	assert tag.requiresVersion() == ProtocolVersion.V1
	assert requiresVersion(tag) == ProtocolVersion.lowest()


@pytest.mark.parametrize('text', ['#EXT-X-ENDLIST extra', '#EXT-X-ENDLIST:', '#EXT-X-ENDLISTS'])
def test_ext_x_endlist_rejects_trailing_text(text):
	with pytest.raises(InvalidInputError):
		parse(text)


def test_marker_tag_against_the_wrong_prefix():
	with pytest.raises(UnmatchedPrefixError):
		ExtXEndList.fromText('#EXTM3U')


def test_protocol_version_orders_by_rank():
	assert ProtocolVersion.lowest() == ProtocolVersion.V1
	assert ProtocolVersion.V3 > ProtocolVersion.V2
	assert max([ProtocolVersion.V1, ProtocolVersion.V3, ProtocolVersion.V2]) == ProtocolVersion.V3
	assert str(ProtocolVersion.V7) == '7'


def test_registry_tries_longest_prefix_first():
	lengths = [len(tagType.PREFIX) for tagType in TAG_REGISTRY]
	assert lengths == sorted(lengths, reverse=True)
	assert set(TAG_REGISTRY) == set(TAG_TYPES)
	assert len(set(tagType.PREFIX for tagType in TAG_REGISTRY)) == len(TAG_REGISTRY)


def test_dispatch_picks_the_most_specific_prefix():
	assert parse('#EXT-X-DISCONTINUITY-SEQUENCE:4') == ExtXDiscontinuitySequence(4)
	assert parse('#EXT-X-DISCONTINUITY') == ExtXDiscontinuity()
	assert parse('#EXT-X-MEDIA-SEQUENCE:7') == ExtXMediaSequence(7)
	assert isinstance(parse('#EXT-X-MEDIA:TYPE=VIDEO,GROUP-ID="v",NAME="Main"'), ExtXMedia)


def test_parse_unknown_tag():
	with pytest.raises(UnknownTagError) as excinfo:
		parse('#EXT-X-CUSTOM:FOO=1')
	assert excinfo.value.line == '#EXT-X-CUSTOM:FOO=1'


def test_variants_never_compare_equal():
	assert ExtXEndList() != ExtXDiscontinuity()
	assert ExtXTargetDuration(5) != ExtXMediaSequence(5)
	assert ExtXTargetDuration(5) == ExtXTargetDuration(5)
	assert len(set([ExtXTargetDuration(5), ExtXMediaSequence(5), ExtXTargetDuration(5)])) == 2


def test_tags_are_immutable():
	tag = ExtXTargetDuration(10)
	with pytest.raises(AttributeError):
		tag.duration = 11
	changed = tag._replace(duration=11)
	assert changed == ExtXTargetDuration(11)
	assert tag == ExtXTargetDuration(10)


def test_replace_validates():
	with pytest.raises(InvalidInputError):
		ExtXTargetDuration(10)._replace(duration=-5)


def test_extinf_version_follows_duration():
	assert ExtInf(10).requiresVersion() == ProtocolVersion.V1
	assert ExtInf(9.5).requiresVersion() == ProtocolVersion.V3
	assert parse('#EXTINF:10.0,').requiresVersion() == ProtocolVersion.V3
	assert ExtInf(10, 'intro').toText() == '#EXTINF:10,intro'


def test_extinf_integer_and_float_durations_are_different_values():
	assert ExtInf(10) != ExtInf(10.0)
	assert parse('#EXTINF:10,') != parse('#EXTINF:10.0,')
	assert len(set([ExtInf(10), ExtInf(10.0), ExtInf(10.00)])) == 2
	assert ExtInf(9.5) == parse('#EXTINF:9.50,')


def test_small_and_large_durations_are_written_without_exponents():
	assert ExtInf(1e-05).toText() == '#EXTINF:0.00001,'
	assert ExtInf(1e16).toText() == '#EXTINF:10000000000000000.0,'
	tag = parse('#EXTINF:10000000000000000.5,')
	assert tag.requiresVersion() == ProtocolVersion.V3
	assert parse(tag.toText()) == tag
	assert ExtXStart(timeOffset=-5e-05).toText() == '#EXT-X-START:TIME-OFFSET=-0.00005'


def test_extinf_without_title():
	assert parse('#EXTINF:10') == ExtInf(10, '')
	assert ExtInf(10).toText() == '#EXTINF:10,'


def test_key_versions():
	assert parse('#EXT-X-KEY:METHOD=AES-128,URI="k"').requiresVersion() == ProtocolVersion.V1
	assert parse('#EXT-X-KEY:METHOD=AES-128,URI="k",IV=0x01').requiresVersion() == ProtocolVersion.V2
	assert parse('#EXT-X-KEY:METHOD=SAMPLE-AES,URI="k",KEYFORMAT="identity"').requiresVersion() == ProtocolVersion.V5
	assert ExtXKey(method='NONE').requiresVersion() == ProtocolVersion.V1


def test_other_tag_versions():
	assert ExtXByteRange(100).requiresVersion() == ProtocolVersion.V4
	assert ExtXIFramesOnly().requiresVersion() == ProtocolVersion.V4
	assert ExtXMap(uri='init.mp4').requiresVersion() == ProtocolVersion.V6
	assert ExtM3u().requiresVersion() == ProtocolVersion.V1
	assert ExtXVersion(7).requiresVersion() == ProtocolVersion.V1


def test_media_instream_service_needs_version_7():
	service = ExtXMedia(mediaType='CLOSED-CAPTIONS', groupId='cc', name='English', instreamId='SERVICE3')
	caption = service._replace(instreamId='CC1')
	assert service.requiresVersion() == ProtocolVersion.V7
	assert caption.requiresVersion() == ProtocolVersion.V1


def test_version_tag():
	assert parse('#EXT-X-VERSION:3') == ExtXVersion(ProtocolVersion.V3)
	assert ExtXVersion(3).toText() == '#EXT-X-VERSION:3'
	with pytest.raises(InvalidInputError):
		parse('#EXT-X-VERSION:8')
	with pytest.raises(InvalidInputError):
		ExtXVersion(0)


def test_attribute_tag_values():
	tag = parse('#EXT-X-STREAM-INF:BANDWIDTH=1280000,RESOLUTION=1280x720,CLOSED-CAPTIONS=NONE')
	assert tag.bandwidth == 1280000
	assert tag.resolution == (1280, 720)
	assert isinstance(tag.closedCaptions, BareToken)
	assert tag.codecs is None
	quotedNone = parse('#EXT-X-STREAM-INF:BANDWIDTH=1,CLOSED-CAPTIONS="NONE"')
	assert quotedNone.toText() == '#EXT-X-STREAM-INF:BANDWIDTH=1,CLOSED-CAPTIONS="NONE"'
	assert parse('#EXT-X-START:TIME-OFFSET=25').precise is None
	assert parse('#EXT-X-MAP:URI="init.mp4",BYTERANGE="720@0"').byteRange == (720, 0)


def test_programmatic_tags_serialize_in_attribute_order():
	tag = ExtXStreamInf(bandwidth=1000, codecs='avc1.4d401f,mp4a.40.2', resolution=(640, 360))
	assert tag.toText() == '#EXT-X-STREAM-INF:BANDWIDTH=1000,CODECS="avc1.4d401f,mp4a.40.2",RESOLUTION=640x360'
	assert parse(tag.toText()) == tag
	assert ExtXPlaylistType('VOD').toText() == '#EXT-X-PLAYLIST-TYPE:VOD'
	assert ExtXStart(timeOffset=-3, precise=False).toText() == '#EXT-X-START:TIME-OFFSET=-3,PRECISE=NO'


def test_unknown_attribute_is_rejected():
	with pytest.raises(UnexpectedAttributeError) as excinfo:
		parse('#EXT-X-START:TIME-OFFSET=1,FOO=2')
	assert excinfo.value.name == 'FOO'


def test_missing_attribute_is_rejected():
	with pytest.raises(MissingAttributeError) as excinfo:
		parse('#EXT-X-STREAM-INF:CODECS="avc1.4d401f"')
	assert excinfo.value.name == 'BANDWIDTH'


@pytest.mark.parametrize('line', [
	'#EXT-X-STREAM-INF:BANDWIDTH="100"',
	'#EXT-X-MAP:URI=init.mp4',
	'#EXT-X-MEDIA:TYPE=DATA,GROUP-ID="g",NAME="n"',
	'#EXT-X-MEDIA:TYPE=AUDIO,GROUP-ID="g",NAME="n",DEFAULT=yes',
	'#EXT-X-STREAM-INF:BANDWIDTH=1,RESOLUTION=1280',
	'#EXT-X-STREAM-INF:BANDWIDTH=1,CLOSED-CAPTIONS=OFF',
	'#EXT-X-KEY:METHOD=AES-128,URI="k",IV=1234',
	'#EXT-X-PLAYLIST-TYPE:LIVE',
	'#EXT-X-PROGRAM-DATE-TIME:yesterday',
	'#EXT-X-TARGETDURATION:ten',
	'#EXT-X-MEDIA:TYPE=CLOSED-CAPTIONS,GROUP-ID="cc",NAME="n",INSTREAM-ID="SERVICE64"',
])
def test_malformed_values_are_rejected(line):
	with pytest.raises(InvalidInputError):
		parse(line)


def test_key_rules():
	with pytest.raises(MissingAttributeError):
		ExtXKey(method='AES-128')
	with pytest.raises(UnexpectedAttributeError):
		parse('#EXT-X-KEY:METHOD=NONE,URI="k"')
	with pytest.raises(InvalidInputError):
		ExtXSessionKey(method='NONE')


def test_session_data_needs_exactly_one_of_value_and_uri():
	with pytest.raises(MissingAttributeError):
		ExtXSessionData(dataId='com.example')
	with pytest.raises(UnexpectedAttributeError):
		ExtXSessionData(dataId='com.example', value='v', uri='data.json')


def test_media_rules():
	with pytest.raises(MissingAttributeError):
		ExtXMedia(mediaType='CLOSED-CAPTIONS', groupId='cc', name='English')
	with pytest.raises(UnexpectedAttributeError):
		ExtXMedia(mediaType='AUDIO', groupId='a', name='English', instreamId='CC1')
	with pytest.raises(UnexpectedAttributeError):
		ExtXMedia(mediaType='AUDIO', groupId='a', name='English', forced=True)
	with pytest.raises(InvalidInputError):
		ExtXMedia(mediaType='AUDIO', groupId='a', name='English', default=True, autoSelect=False)


def test_date_range_end_on_next_rules():
	with pytest.raises(MissingAttributeError):
		parse('#EXT-X-DATERANGE:ID="a",START-DATE="2014-03-05T11:15:00Z",END-ON-NEXT=YES')
	tag = parse('#EXT-X-DATERANGE:ID="a",CLASS="c",START-DATE="2014-03-05T11:15:00Z",END-ON-NEXT=YES')
	assert tag.endOnNext == 'YES'
	with pytest.raises(UnexpectedAttributeError):
		tag._replace(duration=10)



def test_date_range_keeps_client_attributes():
	line = '#EXT-X-DATERANGE:ID="a",X-COM-EXAMPLE="v",START-DATE="2014-03-05T11:15:00Z",X-HEX=0x1F'
	tag = parse(line)
	assert tag.id == 'a'
	assert tag.clientAttributes == (('X-COM-EXAMPLE', 'v', True), ('X-HEX', '0x1F', False))
	assert tag.toText() == '#EXT-X-DATERANGE:ID="a",START-DATE="2014-03-05T11:15:00Z",X-COM-EXAMPLE="v",X-HEX=0x1F'
	assert parse(tag.toText()) == tag
	built = ExtXDateRange(id='a', startDate='2014-03-05T11:15:00Z', clientAttributes=(('X-SCORE', '7', False),))
	assert built.toText() == '#EXT-X-DATERANGE:ID="a",START-DATE="2014-03-05T11:15:00Z",X-SCORE=7'


@pytest.mark.parametrize('line', [
	'#EXT-X-DATERANGE:ID="a",START-DATE="2014-03-05T11:15:00Z",COM-EXAMPLE="v"',
	'#EXT-X-DATERANGE:ID="a",START-DATE="2014-03-05T11:15:00Z",x-lower="v"',
	'#EXT-X-DATERANGE:ID="a",START-DATE="2014-03-05T11:15:00Z",X-="v"',
])
def test_date_range_rejects_other_attribute_names(line):
	with pytest.raises(UnexpectedAttributeError):
		parse(line)


def test_client_attributes_only_on_date_range():
	with pytest.raises(UnexpectedAttributeError):
		parse('#EXT-X-STREAM-INF:BANDWIDTH=1,X-COM-EXAMPLE="v"')


@pytest.mark.parametrize('clientAttributes', [
	(('X-A', 'bare word', False),),
	(('X-A', 'say "hi"', True),),
	(('X-A', '1', False), ('X-A', '2', False)),
	[('X-A', '1', False)],
	(('X-A', '1'),),
])
def test_date_range_refuses_bad_client_attributes(clientAttributes):
	with pytest.raises((InvalidInputError, UnexpectedAttributeError)):
		ExtXDateRange(id='a', startDate='2014-03-05T11:15:00Z', clientAttributes=clientAttributes)

@pytest.mark.parametrize('build', [
	lambda: ExtXTargetDuration(-1),
	lambda: ExtXTargetDuration(True),
	lambda: ExtXMediaSequence(2 ** 64),
	lambda: ExtInf(float('inf')),
	lambda: ExtInf(float('nan')),
	lambda: ExtInf(-1),
	lambda: ExtInf(10, 'two\nlines'),
	lambda: ExtXStreamInf(bandwidth=1, codecs='say "hi"'),
	lambda: ExtXStreamInf(bandwidth=1, resolution=(1280,)),
	lambda: ExtXPlaylistType('LIVE'),
	lambda: ExtXByteRange(-1),
])
def test_values_that_could_not_be_read_back_are_refused(build):
	with pytest.raises(InvalidInputError):
		build()
