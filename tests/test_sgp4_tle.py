"""Tests for TLE validation, parsing and gravity constants."""

from datetime import datetime, timezone

import pytest
from sgp4.api import WGS72 as SGP4_WGS72
from sgp4.api import Satrec

from orbitpass.exceptions import InvalidInputError, MalformedTLEError
from orbitpass.sgp4 import (
    WGS72,
    WGS72OLD,
    WGS84,
    compute_checksum,
    get_gravity_model,
    parse_tle,
    parse_tle_text,
    validate_tle_line,
)

# ISS TLE
ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"

# Vallado test case 00005
VAN_LINE1 = "1 00005U 58002B   00179.78495062  .00000023  00000-0  28098-4 0  4753"
VAN_LINE2 = "2 00005  34.2682 348.7242 1859667 331.7664  19.3264 10.82419157413667"


def _replace(line: str, start: int, text: str) -> str:
    """Overwrite columns of a TLE line and recompute its checksum."""
    edited = line[:start] + text + line[start + len(text):]
    return edited[:68] + str(compute_checksum(edited))


class TestEarthGravityConstants:
    def test_wgs72_values(self):
        assert WGS72.mu == 398600.8
        assert WGS72.radiusearthkm == 6378.135
        assert WGS72.xke == pytest.approx(0.07436691613317342, rel=1e-12)
        assert WGS72.tumin == pytest.approx(1.0 / WGS72.xke)

    def test_wgs72old_xke(self):
        assert WGS72OLD.xke == 0.0743669161

    def test_wgs84_values(self):
        assert WGS84.radiusearthkm == 6378.137
        assert WGS84.j3oj2 == pytest.approx(WGS84.j3 / WGS84.j2)

    @pytest.mark.parametrize("name, model", [("wgs72", WGS72), ("WGS84", WGS84), ("wgs72old", WGS72OLD)])
    def test_lookup_by_name(self, name, model):
        assert get_gravity_model(name) is model

    def test_lookup_instance_passthrough(self):
        assert get_gravity_model(WGS84) is WGS84

    def test_unknown_name(self):
        with pytest.raises(InvalidInputError, match="Unknown gravity model"):
            get_gravity_model("egm96")


class TestChecksum:
    def test_iss_line1(self):
        assert compute_checksum(ISS_LINE1) == 7

    def test_iss_line2(self):
        assert compute_checksum(ISS_LINE2) == 7

    def test_minus_counts_as_one(self):
        assert compute_checksum("1 -" + " " * 66) == 2

    def test_letters_ignored(self):
        assert compute_checksum("ABC" + " " * 65) == 0


class TestValidateTLELine:
    def test_valid_lines(self):
        validate_tle_line(ISS_LINE1, 1)
        validate_tle_line(ISS_LINE2, 2)

    def test_trailing_whitespace_ignored(self):
        validate_tle_line(ISS_LINE1 + "   \r", 1)

    def test_too_short(self):
        with pytest.raises(MalformedTLEError, match="68 chars"):
            validate_tle_line(ISS_LINE1[:68], 1)

    def test_too_long(self):
        with pytest.raises(MalformedTLEError, match="70 chars"):
            validate_tle_line(ISS_LINE1 + "0", 1)

    def test_wrong_line_number(self):
        with pytest.raises(MalformedTLEError, match="does not start with '2'"):
            validate_tle_line(ISS_LINE1, 2)

    def test_checksum_mismatch(self):
        with pytest.raises(MalformedTLEError, match="checksum mismatch"):
            validate_tle_line(ISS_LINE1[:68] + "8", 1)

    def test_non_digit_checksum(self):
        with pytest.raises(MalformedTLEError, match="non-digit checksum"):
            validate_tle_line(ISS_LINE1[:68] + "X", 1)

    def test_separator_column(self):
        bad = _replace(ISS_LINE1, 17, "X")
        with pytest.raises(MalformedTLEError, match="column 18"):
            validate_tle_line(bad, 1)


class TestParseTLE:
    def test_identity_fields(self):
        tle = parse_tle(ISS_LINE1, ISS_LINE2, name="ISS (ZARYA)")
        assert tle.satnum == "25544"
        assert tle.classification == "U"
        assert tle.intldesg == "98067A"
        assert tle.epochyr == 8
        assert tle.epochdays == pytest.approx(264.51782528)
        assert tle.elnum == 292
        assert tle.revnum == 56353
        assert tle.name == "ISS (ZARYA)"
        assert tle.label == "ISS (ZARYA)"

    def test_label_without_name(self):
        assert parse_tle(ISS_LINE1, ISS_LINE2).label == "25544"

    def test_user_facing_properties(self):
        tle = parse_tle(ISS_LINE1, ISS_LINE2)
        assert tle.inclination == pytest.approx(51.6416, abs=1e-10)
        assert tle.mean_motion == pytest.approx(15.72125391, abs=1e-10)
        assert tle.period_minutes == pytest.approx(1440.0 / 15.72125391, rel=1e-12)

    def test_epoch(self):
        tle = parse_tle(ISS_LINE1, ISS_LINE2)
        assert tle.epoch == datetime(2008, 9, 20, 12, 25, 40, 104192, tzinfo=timezone.utc)

    def test_epoch_twentieth_century(self):
        tle = parse_tle(VAN_LINE1, VAN_LINE2)
        assert tle.epoch.year == 2000
        assert parse_tle(
            "1 08195U 75081A   06176.33215444  .00000099  00000-0  11873-3 0   813",
            "2 08195  64.1586 279.0717 6877146 264.7651  20.2257  2.00491383225656",
        ).epoch.year == 2006

    @pytest.mark.parametrize("line1, line2", [(ISS_LINE1, ISS_LINE2), (VAN_LINE1, VAN_LINE2)])
    def test_matches_reference_parser(self, line1, line2):
        tle = parse_tle(line1, line2)
        ref = Satrec.twoline2rv(line1, line2, SGP4_WGS72)

        assert tle.jdsatepoch == pytest.approx(ref.jdsatepoch, abs=1e-9)
        assert tle.jdsatepochF == pytest.approx(ref.jdsatepochF, abs=1e-12)
        assert tle.bstar == pytest.approx(ref.bstar, rel=1e-12)
        assert tle.ndot == pytest.approx(ref.ndot, rel=1e-12, abs=1e-20)
        assert tle.nddot == pytest.approx(ref.nddot, rel=1e-12, abs=1e-20)
        assert tle.ecco == pytest.approx(ref.ecco, rel=1e-12)
        assert tle.inclo == pytest.approx(ref.inclo, rel=1e-12)
        assert tle.nodeo == pytest.approx(ref.nodeo, rel=1e-12)
        assert tle.argpo == pytest.approx(ref.argpo, rel=1e-12)
        assert tle.mo == pytest.approx(ref.mo, rel=1e-12)
        assert tle.no_kozai == pytest.approx(ref.no_kozai, rel=1e-12)

    def test_implied_decimal_bstar(self):
        assert parse_tle(VAN_LINE1, VAN_LINE2).bstar == pytest.approx(0.28098e-4, rel=1e-12)
        assert parse_tle(ISS_LINE1, ISS_LINE2).bstar == pytest.approx(-0.11606e-4, rel=1e-12)

    def test_catalog_number_mismatch(self):
        with pytest.raises(MalformedTLEError, match="do not match"):
            parse_tle(ISS_LINE1, VAN_LINE2)

    def test_unparsable_field(self):
        bad = _replace(ISS_LINE2, 8, " 51.64X6")
        with pytest.raises(MalformedTLEError, match="Unparsable"):
            parse_tle(ISS_LINE1, bad)

    def test_zero_mean_motion(self):
        bad = _replace(ISS_LINE2, 52, " 0.00000000")
        with pytest.raises(MalformedTLEError, match="non-positive mean motion"):
            parse_tle(ISS_LINE1, bad)

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            parse_tle("bad line 1", ISS_LINE2)

    def test_frozen(self):
        tle = parse_tle(ISS_LINE1, ISS_LINE2)
        with pytest.raises(AttributeError):
            tle.satnum = "00001"


class TestParseTLEText:
    def test_three_line_format(self):
        text = f"ISS (ZARYA)\n{ISS_LINE1}\n{ISS_LINE2}\nVANGUARD 1\n{VAN_LINE1}\n{VAN_LINE2}\n"
        elements = parse_tle_text(text)
        assert [e.name for e in elements] == ["ISS (ZARYA)", "VANGUARD 1"]
        assert [e.satnum for e in elements] == ["25544", "00005"]

    def test_two_line_format(self):
        elements = parse_tle_text(f"{ISS_LINE1}\n{ISS_LINE2}\n\n{VAN_LINE1}\n{VAN_LINE2}")
        assert len(elements) == 2
        assert elements[0].name is None

    def test_zero_prefixed_names_and_crlf(self):
        text = f"0 ISS (ZARYA)\r\n{ISS_LINE1}\r\n{ISS_LINE2}\r\n"
        (tle,) = parse_tle_text(text)
        assert tle.name == "ISS (ZARYA)"

    def test_empty_text(self):
        assert parse_tle_text("\n  \n") == []

    def test_orphan_line2(self):
        with pytest.raises(MalformedTLEError, match="without a preceding line 1"):
            parse_tle_text(ISS_LINE2)

    def test_line1_without_line2(self):
        with pytest.raises(MalformedTLEError, match="without a following line 2"):
            parse_tle_text(f"{ISS_LINE1}\n{VAN_LINE1}\n{VAN_LINE2}")

    def test_dangling_name(self):
        with pytest.raises(MalformedTLEError, match="not followed by a TLE"):
            parse_tle_text(f"{ISS_LINE1}\n{ISS_LINE2}\nLONELY NAME\n")

    def test_invalid_entry_propagates(self):
        with pytest.raises(MalformedTLEError, match="checksum"):
            parse_tle_text(f"{ISS_LINE1[:68]}0\n{ISS_LINE2}")
