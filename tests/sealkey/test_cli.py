"""Tests for the sealkey command line."""

import json
import stat

import pytest

from sealkey.cli import build_parser, main
from sealkey.primitives.loader import load_ecdsa_private_key


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SEALKEY_PASSWORD", "correct-horse")
    return tmp_path


class TestParser:
    """Argument parsing."""

    def test_verb_required(self):
        """Running without a verb is a usage error."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_defaults(self):
        """generate-key-pair writes cosign.* and does not overwrite by default."""
        args = build_parser().parse_args(["generate-key-pair"])
        assert args.output_key_prefix == "cosign"
        assert args.force is False


class TestGenerateKeyPair:
    """generate-key-pair verb."""

    def test_writes_files(self, workdir, capsys):
        """Both files are written and the private one is owner-only."""
        main(["generate-key-pair"])

        result = json.loads(capsys.readouterr().out)
        assert result["success"] is True
        assert result["type"] == "ENCRYPTED COSIGN PRIVATE KEY"

        private_path = workdir / "cosign.key"
        public_path = workdir / "cosign.pub"
        assert stat.S_IMODE(private_path.stat().st_mode) == 0o600
        signer = load_ecdsa_private_key(private_path.read_bytes(), b"correct-horse")
        assert signer.public_key_pem() == public_path.read_bytes()

    def test_custom_prefix(self, workdir, capsys):
        """A prefix with directories creates them."""
        main(["generate-key-pair", "--output-key-prefix", "keys/release"])
        assert (workdir / "keys" / "release.key").exists()
        assert (workdir / "keys" / "release.pub").exists()

    def test_refuses_overwrite(self, workdir, capsys):
        """An existing key pair is left alone without --force."""
        main(["generate-key-pair"])
        with pytest.raises(SystemExit) as exc_info:
            main(["generate-key-pair"])
        assert exc_info.value.code == 1
        assert "already exists" in capsys.readouterr().err

    def test_refuses_existing_public_key(self, workdir, capsys):
        """An existing .pub alone also blocks generation."""
        (workdir / "cosign.pub").write_bytes(b"keep me")
        with pytest.raises(SystemExit) as exc_info:
            main(["generate-key-pair"])
        assert exc_info.value.code == 1
        assert "cosign.pub already exists" in capsys.readouterr().err
        assert (workdir / "cosign.pub").read_bytes() == b"keep me"
        assert not (workdir / "cosign.key").exists()

    def test_unwritable_destination(self, workdir, capsys):
        """Filesystem errors end in a clean error message, not a traceback."""
        (workdir / "blocker").write_bytes(b"")
        with pytest.raises(SystemExit) as exc_info:
            main(["generate-key-pair", "--output-key-prefix", "blocker/key"])
        assert exc_info.value.code == 1
        assert "writing key files" in capsys.readouterr().err

    def test_force_overwrites(self, workdir, capsys):
        """--force replaces an existing pair."""
        main(["generate-key-pair"])
        before = (workdir / "cosign.pub").read_bytes()
        main(["generate-key-pair", "--force"])
        assert (workdir / "cosign.pub").read_bytes() != before


class TestPublicKey:
    """public-key verb."""

    def test_prints_public_key(self, workdir, capsys):
        """Output matches the .pub written at generation."""
        main(["generate-key-pair"])
        capsys.readouterr()

        main(["public-key", "--key", "cosign.key"])
        assert capsys.readouterr().out.encode("ascii") == (workdir / "cosign.pub").read_bytes()

    def test_wrong_passphrase(self, workdir, capsys, monkeypatch):
        """A wrong SEALKEY_PASSWORD exits 1 with the decryption error."""
        main(["generate-key-pair"])
        monkeypatch.setenv("SEALKEY_PASSWORD", "wrong")

        with pytest.raises(SystemExit) as exc_info:
            main(["public-key", "--key", "cosign.key"])
        assert exc_info.value.code == 1
        assert "decryption failed" in capsys.readouterr().err

    def test_missing_file(self, workdir, capsys):
        """A missing key path is reported by name."""
        with pytest.raises(SystemExit):
            main(["public-key", "--key", "nope.key"])
        assert "not found" in capsys.readouterr().err
