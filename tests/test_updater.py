import hashlib
import io
import tarfile

import pytest
import semver

import selfupdate
from selfupdate.core import updater as updater_module
from selfupdate.core.config import Config
from selfupdate.core.errors import (
    InvalidEndpointURL,
    InvalidFilterPattern,
    NoSuitableRelease,
    ValidationFailed,
)
from selfupdate.core.updater import Updater, default_updater, set_default_updater
from selfupdate.core.validate import SHA256Validator
from tests.conftest import FakeGitHub, release_payload

NEW_EXE = b"\x7fELF version 1.1.0"


def tar_gz(name: str, data: bytes) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        info = tarfile.TarInfo(name)
        info.size = len(data)
        tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


@pytest.fixture
def fake():
    archive = tar_gz("tool", NEW_EXE)
    checksum = f"{hashlib.sha256(archive).hexdigest()}  tool_linux_amd64.tar.gz\n".encode()
    fake = FakeGitHub([
        release_payload("v1.1.0", [
            ("tool_linux_amd64.tar.gz", 10, len(archive)),
            ("tool_linux_amd64.tar.gz.sha256", 11, len(checksum)),
        ]),
        release_payload("v1.0.0", [("tool_linux_amd64.tar.gz", 1, 100)]),
        release_payload("v2.0.0-rc.1", [("tool_linux_amd64.tar.gz", 20, 100)], prerelease=True),
    ])
    fake.contents[10] = archive
    fake.contents[11] = checksum
    return fake


@pytest.fixture
def executable(tmp_path):
    path = tmp_path / "tool"
    path.write_bytes(b"\x7fELF version 1.0.0")
    path.chmod(0o755)
    return path


class TestConstruction:
    def test_empty_config(self):
        up = Updater(Config())
        assert up.filters == ()
        assert up.validator is None
        assert up.client.base_url == "https://api.github.com/"

    def test_enterprise_client(self):
        base_url = "https://github.company.com/"
        up = Updater(Config(api_token="hogehoge", enterprise_base_url=base_url))
        assert up.client.base_url == base_url + "api/v3/"
        assert up.client.upload_url == base_url + "api/uploads/"

        upload_url = "https://upload.github.company.com/api/uploads/"
        up = Updater(Config(
            api_token="hogehoge",
            enterprise_base_url=base_url,
            enterprise_upload_url=upload_url,
        ))
        assert up.client.base_url == base_url + "api/v3/"
        assert up.client.upload_url == upload_url

    def test_enterprise_invalid_url(self):
        with pytest.raises(InvalidEndpointURL):
            Updater(Config(api_token="hogehoge", enterprise_base_url=":this is not a URL"))

    def test_compile_filters(self):
        filters = ("^hello$", r"^(\d\.)+\d$")
        up = Updater(Config(filters=filters))
        assert [f.pattern for f in up.filters] == list(filters)

    def test_broken_filter(self):
        with pytest.raises(InvalidFilterPattern) as exc_info:
            Updater(Config(filters=("(foo",)))
        assert 'Could not compile regular expression "(foo" for filtering releases' in str(exc_info.value)


class TestDetect:
    def test_detect_latest_skips_prerelease(self, fake):
        up = Updater(Config(), transport=fake.transport())
        release = up.detect_latest("owner", "tool")
        assert release.version == semver.Version(1, 1, 0)
        assert release.asset_id == 10

    def test_detect_version_exact(self, fake):
        up = Updater(Config(), transport=fake.transport())
        release = up.detect_version("owner", "tool", "v2.0.0-rc.1")
        assert release.version == semver.Version.parse("2.0.0-rc.1")

    def test_detect_version_missing(self, fake):
        up = Updater(Config(), transport=fake.transport())
        with pytest.raises(NoSuitableRelease):
            up.detect_version("owner", "tool", "v9.9.9")

    def test_detect_with_validator(self, fake):
        up = Updater(Config(validator=SHA256Validator()), transport=fake.transport())
        assert up.detect_latest("owner", "tool").validation_asset_id == 11


class TestUpdate:
    def test_update_command_installs_newer(self, fake, executable):
        up = Updater(Config(), transport=fake.transport())
        latest = up.update_command(executable, "1.0.0", "owner", "tool", show_progress=False)
        assert latest.version == semver.Version(1, 1, 0)
        assert executable.read_bytes() == NEW_EXE

    def test_update_command_up_to_date(self, fake, executable):
        up = Updater(Config(), transport=fake.transport())
        before = executable.read_bytes()
        latest = up.update_command(executable, "v1.1.0", "owner", "tool", show_progress=False)
        assert latest.version == semver.Version(1, 1, 0)
        assert executable.read_bytes() == before
        assert not any("/releases/assets/" in r.url.path for r in fake.requests)

    def test_update_validates_checksum(self, fake, executable):
        up = Updater(Config(validator=SHA256Validator()), transport=fake.transport())
        up.update_command(executable, "1.0.0", "owner", "tool", show_progress=False)
        assert executable.read_bytes() == NEW_EXE

    def test_update_rejects_bad_checksum(self, fake, executable):
        fake.contents[11] = b"0" * 64
        up = Updater(Config(validator=SHA256Validator()), transport=fake.transport())
        before = executable.read_bytes()
        with pytest.raises(ValidationFailed):
            up.update_command(executable, "1.0.0", "owner", "tool", show_progress=False)
        assert executable.read_bytes() == before

    def test_update_self(self, fake, executable, monkeypatch):
        monkeypatch.setattr(updater_module, "executable_path", lambda: executable)
        up = Updater(Config(), transport=fake.transport())
        up.update_self("0.9.0", "owner", "tool", show_progress=False)
        assert executable.read_bytes() == NEW_EXE


class TestDefaultUpdater:
    def test_created_once(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GITHUB_TOKEN", "env-token")
        monkeypatch.setenv("SELFUPDATE_CONFIG", str(tmp_path / "none.yaml"))
        first = default_updater()
        assert first is default_updater()
        assert first.config.api_token == "env-token"

    def test_set_default_updater(self, fake):
        up = Updater(Config(), transport=fake.transport())
        set_default_updater(up)
        assert selfupdate.detect_latest("owner", "tool").version == semver.Version(1, 1, 0)
        assert selfupdate.detect_version("owner", "tool", "v1.0.0").asset_id == 1
