"""Tests for maillog/dispatcher.py"""

from datetime import timezone

import pytest

from maillog.dispatcher import EXTRACTORS, SUBSYSTEM_TABLE, build_table, dispatch_line
from maillog.errors import MalformedLine
from maillog.models import Component, ConnectionEvent, RelayEvent
from maillog.tokenizer import subsystem_tag


class TestDispatchLine:
    def test_every_component_has_an_extractor(self):
        assert set(EXTRACTORS) == set(Component)
        assert set(SUBSYSTEM_TABLE.values()) == set(Component)

    def test_routes_smtpd(self, golden_lines):
        event = dispatch_line(golden_lines["connect"], 2025, timezone.utc)
        assert isinstance(event, ConnectionEvent)

    def test_smtp_is_not_smtpd(self, golden_lines):
        event = dispatch_line(golden_lines["smtp"], 2025, timezone.utc)
        assert isinstance(event, RelayEvent)

    def test_component_matches_dispatching_tag(self, golden_lines):
        for line in golden_lines.values():
            event = dispatch_line(line, 2025, timezone.utc)
            assert event.component is SUBSYSTEM_TABLE[subsystem_tag(line)]

    def test_line_without_marker_skipped(self):
        line = "Jan 5 10:27:01 mail dovecot: imap-login: Login: user=<bob>, method=PLAIN"
        assert dispatch_line(line, 2025) is None

    def test_empty_line_skipped(self):
        assert dispatch_line("", 2025) is None

    def test_unknown_subsystem_skipped(self):
        line = "Jan 5 10:27:00 mail postfix/anvil[1500]: statistics: max connection rate 1/60s"
        assert dispatch_line(line, 2025) is None

    def test_unmodeled_smtpd_message_skipped(self):
        line = "Jan 5 10:27:00 mail postfix/smtpd[1]: warning: non-SMTP command from x[1.2.3.4]"
        assert dispatch_line(line, 2025) is None

    def test_missing_delimiter_raises_with_component(self):
        line = "Jan 5 10:22:31 mail postfix/smtpd[1234] connect from host[10.0.0.5]"
        with pytest.raises(MalformedLine) as excinfo:
            dispatch_line(line, 2025)
        assert excinfo.value.component == "connection"

    def test_reference_year_applied(self, golden_lines):
        event = dispatch_line(golden_lines["pickup"], 2019, timezone.utc)
        assert event.event_time.year == 2019


class TestBuildTable:
    def test_defaults_preserved(self):
        table = build_table()
        assert table == SUBSYSTEM_TABLE
        assert table is not SUBSYSTEM_TABLE

    def test_alias_routes_submission_service(self):
        table = build_table({"postfix/submission/smtpd": "connection"})
        line = "Jan 5 10:22:31 mail postfix/submission/smtpd[77]: connect from c.example[10.0.0.9]"
        assert dispatch_line(line, 2025) is None
        event = dispatch_line(line, 2025, timezone.utc, table)
        assert event.component is Component.CONNECTION
        assert event.client_ip == "10.0.0.9"

    def test_unknown_component_rejected(self):
        with pytest.raises(ValueError):
            build_table({"postfix/lmtp": "lmtp"})
