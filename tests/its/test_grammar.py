"""Tests for ITS grammar matching."""

from tests.its.samples import (
    EMERGENCY,
    IMEI,
    RICH_BASIC,
    RICH_FULL,
    RICH_NO_ADC,
    SIMPLE,
    telemetry_sentence,
)
from tracking.its.grammar import (
    AdcBlock,
    RichTrailer,
    SimpleTrailer,
    StatusIdentity,
    TelemetryHeader,
    TypeHeader,
    ValidityIdentity,
    match_sentence,
)


class TestMatchSentenceRejects:
    """Sentences that are not ITS sentences yield None."""

    def test_empty_string(self):
        assert match_sentence("") is None

    def test_missing_dollar(self):
        assert match_sentence(RICH_FULL.replace("$", "")) is None

    def test_nmea_sentence(self):
        sentence = "$GNGGA,123519.00,4807.038,N,01131.000,E,1,08,0.9,545.4,M,47.0,M,,*7F"
        assert match_sentence(sentence) is None

    def test_short_device_identifier(self):
        assert match_sentence(RICH_BASIC.replace(IMEI, IMEI[:14])) is None

    def test_missing_trailer(self):
        sentence = (
            "$,01,ITS,1.0,NR,01,L,861693034634154,KA01G1234,1,09112018,083542,"
            "12.975095,N,077.668045,E,*"
        )
        assert match_sentence(sentence) is None

    def test_bad_hemisphere(self):
        assert match_sentence(telemetry_sentence(position="12.975095,X,077.668045,E")) is None

    def test_handshake_only(self):
        assert match_sentence("$,01,*") is None


class TestMatchSentenceHeader:
    """Header alternatives: telemetry header first, type header second."""

    def test_telemetry_header(self):
        result = match_sentence(RICH_BASIC)
        assert result is not None
        assert result.header == TelemetryHeader(status="NR", event="01", history="L")
        assert result.imei == IMEI

    def test_history_flag(self):
        result = match_sentence(telemetry_sentence(history="H"))
        assert result is not None
        assert result.header.history == "H"

    def test_type_header(self):
        result = match_sentence(EMERGENCY)
        assert result is not None
        assert result.header == TypeHeader(type="EMR")
        assert result.imei == IMEI

    def test_prefix_before_dollar_is_ignored(self):
        result = match_sentence("garbage" + RICH_BASIC)
        assert result is not None
        assert result.imei == IMEI


class TestMatchSentenceIdentity:
    """Identity alternatives: status code, or registration + validity digit."""

    def test_validity_digit(self):
        result = match_sentence(telemetry_sentence(identity="KA01G1234,0"))
        assert result is not None
        assert result.identity == ValidityIdentity(valid="0")

    def test_status_code(self):
        result = match_sentence(telemetry_sentence(identity="BL"))
        assert result is not None
        assert result.identity == StatusIdentity(status="BL")


class TestMatchSentenceDateTime:
    def test_four_digit_year(self):
        result = match_sentence(RICH_BASIC)
        assert result is not None
        assert result.date == ("09", "11", "2018")
        assert result.time == ("08", "35", "42")

    def test_two_digit_year(self):
        result = match_sentence(telemetry_sentence(date_time="091118,083542"))
        assert result is not None
        assert result.date == ("09", "11", "18")

    def test_comma_separated_components(self):
        result = match_sentence(telemetry_sentence(date_time="09,11,2018,08,35,42"))
        assert result is not None
        assert result.date == ("09", "11", "2018")
        assert result.time == ("08", "35", "42")


class TestMatchSentenceValidity:
    def test_letter_absent(self):
        result = match_sentence(telemetry_sentence())
        assert result is not None
        assert result.validity is None

    def test_letter_present(self):
        result = match_sentence(telemetry_sentence(validity="V"))
        assert result is not None
        assert result.validity == "V"

    def test_coordinates(self):
        result = match_sentence(SIMPLE)
        assert result is not None
        assert result.latitude == ("12.975095", "S")
        assert result.longitude == ("077.668045", "W")


class TestMatchSentenceTrailer:
    """Trailer alternatives and their nested optional blocks."""

    def test_rich_without_extended_block(self):
        result = match_sentence(RICH_BASIC)
        assert result is not None
        assert result.trailer == RichTrailer(
            speed="36.0", course="271.5", satellites="12", extended=None
        )

    def test_rich_with_extended_block(self):
        result = match_sentence(RICH_FULL)
        assert result is not None
        extended = result.trailer.extended
        assert extended is not None
        assert extended.altitude == "920.0"
        assert (extended.ignition, extended.charge, extended.emergency) == ("1", "1", "0")
        assert (extended.power, extended.battery) == ("12.6", "4.1")
        assert extended.cells[:5] == ("5", "222", "10", "1A2B", "3C4D")
        assert len(extended.cells) == 17
        assert (extended.inputs, extended.outputs) == ("1011", "10")
        assert extended.adc == AdcBlock(adc1="1.25", adc2="2.50")

    def test_extended_block_without_adc(self):
        result = match_sentence(RICH_NO_ADC)
        assert result is not None
        assert result.trailer.extended is not None
        assert result.trailer.extended.adc is None

    def test_negative_neighbor_tokens(self):
        sentence = RICH_NO_ADC.replace("0,1A2C,3C4E,", "-1,1A2C,3C4E,")
        result = match_sentence(sentence)
        assert result is not None
        assert result.trailer.extended.cells[5] == "-1"

    def test_simple_trailer(self):
        result = match_sentence(SIMPLE)
        assert result is not None
        assert result.trailer == SimpleTrailer(altitude="-12.5", speed="36.0")

    def test_positive_altitude_simple_trailer(self):
        result = match_sentence(telemetry_sentence(trailer="0.0,95.2"))
        assert result is not None
        assert result.trailer == SimpleTrailer(altitude="0.0", speed="95.2")

    def test_trailing_content_ignored(self):
        result = match_sentence(RICH_BASIC + "extra,fields,here")
        assert result is not None


class TestMatchSentenceTokens:
    def test_absent_groups_are_none(self):
        result = match_sentence(SIMPLE)
        assert result is not None
        tokens = result.tokens
        assert tokens[:4] == ("NR", "01", "L", None)
        assert IMEI in tokens
        assert tokens[-2:] == ("-12.5", "36.0")

    def test_every_slot_reported(self):
        full = match_sentence(RICH_FULL)
        simple = match_sentence(SIMPLE)
        assert full is not None and simple is not None
        assert len(full.tokens) == len(simple.tokens)
