import asyncio
import stat
import sys

import pytest

SAMPLE_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<document title="SSLScan Results" version="2.0.16-static" web="http://github.com/rbsec/sslscan">
 <ssltest host="example.com" sniname="example.com" port="443">
  <protocol type="ssl" version="2" enabled="0" />
  <protocol type="ssl" version="3" enabled="0" />
  <protocol type="tls" version="1.2" enabled="1" />
  <protocol type="tls" version="1.3" enabled="1" />
  <fallback supported="1" />
  <renegotiation supported="0" secure="0" />
  <compression supported="0" />
  <heartbleed sslversion="TLSv1.3" vulnerable="0" />
  <heartbleed sslversion="TLSv1.2" vulnerable="0" />
  <cipher status="preferred" sslversion="TLSv1.3" bits="256" cipher="TLS_AES_256_GCM_SHA384" id="0x1302" strength="strong" curve="25519" ecdhebits="253" />
  <cipher status="accepted" sslversion="TLSv1.3" bits="128" cipher="TLS_AES_128_GCM_SHA256" id="0x1301" strength="strong" curve="25519" ecdhebits="253" />
  <cipher status="accepted" sslversion="TLSv1.2" bits="256" cipher="AES256-SHA" id="0x35" strength="medium" />
  <group sslversion="TLSv1.3" bits="128" name="x25519" id="0x001d" />
  <group sslversion="TLSv1.3" bits="192" name="secp384r1" id="0x0018" />
  <certificates>
   <certificate type="short">
    <signature-algorithm>sha256WithRSAEncryption</signature-algorithm>
    <pk error="false" type="RSA" bits="2048" />
    <subject>www.example.org</subject>
    <altnames>DNS:www.example.org, DNS:example.com</altnames>
    <issuer>DigiCert Global G2 TLS RSA SHA256 2020 CA1</issuer>
    <self-signed>false</self-signed>
    <not-valid-before>Jan 30 00:00:00 2024 GMT</not-valid-before>
    <not-valid-after>Mar  1 23:59:59 2025 GMT</not-valid-after>
    <expired>false</expired>
   </certificate>
  </certificates>
 </ssltest>
</document>
"""

MINIMAL_XML = (
    b'<document title="Scan" version="1.0">'
    b'<ssltest host="example.com" port="443">'
    b'<renegotiation supported="1" secure="1"/>'
    b'</ssltest></document>'
)


@pytest.fixture
def sample_xml():
    return SAMPLE_XML


@pytest.fixture
def minimal_xml():
    return MINIMAL_XML


class FakeProcess:
    """
    Stand-in for asyncio.subprocess.Process. communicate() returns the
    configured output right away, or, with hang=True, only after
    exit() or kill() is called.
    """

    def __init__(self, stdout=b"", stderr=b"", returncode=0, hang=False):
        self._stdout = stdout
        self._stderr = stderr
        self._final_returncode = returncode
        self._exited = asyncio.Event()
        if not hang:
            self._exited.set()
        self.returncode = None
        self.killed = False

    async def communicate(self):
        await self._exited.wait()
        self.returncode = self._final_returncode
        return self._stdout, self._stderr

    async def wait(self):
        await self._exited.wait()
        if self.returncode is None:
            self.returncode = self._final_returncode
        return self.returncode

    def exit(self):
        self._exited.set()

    def kill(self):
        self.killed = True
        self._final_returncode = -9
        self._exited.set()


@pytest.fixture
def fake_exec(monkeypatch):
    """
    Patch asyncio.create_subprocess_exec. Returns a recorder whose
    `process` attribute is handed to the scanner and whose `calls`
    list collects the argv of each spawn.
    """

    class Recorder:
        def __init__(self):
            self.calls = []
            self.process = FakeProcess()
            self.error = None

        def configure(self, **kwargs):
            self.process = FakeProcess(**kwargs)

        async def __call__(self, program, *args, **kwargs):
            self.calls.append([program, *args])
            if self.error is not None:
                raise self.error
            return self.process

    recorder = Recorder()
    monkeypatch.setattr(asyncio, "create_subprocess_exec", recorder)
    return recorder


@pytest.fixture
def fake_binary(tmp_path):
    """A file that exists at a path, so binary resolution succeeds."""
    path = tmp_path / "sslscan"
    path.write_text("#!/bin/sh\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return str(path)


@pytest.fixture
def make_script(tmp_path):
    """Write an executable shell script standing in for sslscan."""
    if sys.platform == "win32":
        pytest.skip("requires a POSIX shell")

    def _make(body, name="sslscan"):
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + body)
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "sample.xml"
    path.write_bytes(SAMPLE_XML)
    return str(path)
