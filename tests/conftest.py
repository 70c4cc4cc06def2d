import pytest

GOLDEN_LINES = {
    "connect": "Jan 5 10:22:31 mail postfix/smtpd[1234]: connect from host.example.com[10.0.0.5]",
    "disconnect": "Jan 5 10:22:35 mail postfix/smtpd[1234]: disconnect from host.example.com[10.0.0.5] ehlo=1 mail=1 quit=1 commands=3",
    "lost": "Jan 5 10:26:00 mail postfix/smtpd[1400]: lost connection after CONNECT from unknown[192.0.2.7]",
    "client": "Jan 5 10:22:32 mail postfix/smtpd[1234]: ABC123: client=host.example.com[10.0.0.5]",
    "pickup": "Jan 5 10:25:10 mail postfix/pickup[1300]: DEF456: uid=1000 from=<root>",
    "cleanup": "Jan 5 10:22:33 mail postfix/cleanup[1240]: ABC123: message-id=<20250105.ABC123@host.example.com>",
    "qmgr_removed": "Jan 5 10:22:40 mail postfix/qmgr[1234]: ABC123: removed",
    "qmgr_queued": "Jan 5 10:23:01 mail postfix/qmgr[1234]: ABC123: from=<a@b.com>, size=512, nrcpt=1 (queue active)",
    "smtp": "Jan 5 10:24:00 mail postfix/smtp[1234]: ABC123: to=<x@y.com>, relay=mx.y.com[1.2.3.4]:25, delay=1.2, status=sent (250 OK)",
    "local": "Jan 5 10:25:13 mail postfix/local[1310]: DEF456: to=<bob@mail>, orig_to=<bob>, relay=local, delay=0.05, delays=0.01/0/0/0.04, dsn=2.0.0, status=sent (delivered to mailbox)",
}


@pytest.fixture
def golden_lines():
    return dict(GOLDEN_LINES)
