"""
Tests for the command line and its config — ans104.cli + ans104.config.

TestConfig  — TOML loading, env override, malformed files
TestCLI     — create / verify / inspect / id / tags on files
"""

from __future__ import annotations

import json

import pytest

from ans104.cli import main
from ans104.config import DEFAULT_CONFIG, load_config

# Skip signing tests if cryptography is not installed
try:
    import cryptography
    HAS_CRYPTO = True
except ImportError:
    HAS_CRYPTO = False

skip_no_crypto = pytest.mark.skipif(
    not HAS_CRYPTO,
    reason="cryptography package not installed",
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config lookup away from the user's home directory."""
    monkeypatch.setenv("ANS104_CONFIG", str(tmp_path / "absent.toml"))


@pytest.fixture
def wallet(tmp_path):
    from ans104.signers import Ed25519Signer

    path = tmp_path / "wallet.json"
    path.write_text(json.dumps(Ed25519Signer.from_private_bytes(b"\x05" * 32).to_jwk()))
    return path


@pytest.fixture
def signed_item(tmp_path, wallet, capsys):
    data = tmp_path / "payload.txt"
    data.write_bytes(b"hello")
    out = tmp_path / "hello.item"
    main([
        "create", str(data), "-o", str(out), "--wallet", str(wallet),
        "--tag", "Content-Type=text/plain", "--tag", "App=cli-test",
    ])
    capsys.readouterr()
    return out


# ---------------------------------------------------------------------------
# TestConfig
# ---------------------------------------------------------------------------

class TestConfig:

    def test_defaults_when_absent(self):
        assert load_config() == DEFAULT_CONFIG

    def test_known_keys_only(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('wallet = "/w.json"\nlog_level = "DEBUG"\nextra = 1\n')
        config = load_config(path)
        assert config == {"wallet": "/w.json", "log_level": "DEBUG"}

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "env.toml"
        path.write_text('wallet = "/from-env.json"\n')
        monkeypatch.setenv("ANS104_CONFIG", str(path))
        assert load_config()["wallet"] == "/from-env.json"

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        env = tmp_path / "env.toml"
        env.write_text('wallet = "env"\n')
        explicit = tmp_path / "explicit.toml"
        explicit.write_text('wallet = "explicit"\n')
        monkeypatch.setenv("ANS104_CONFIG", str(env))
        assert load_config(explicit)["wallet"] == "explicit"

    def test_malformed_falls_back(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("wallet = [unclosed\n")
        assert load_config(path) == DEFAULT_CONFIG


# ---------------------------------------------------------------------------
# TestCLI
# ---------------------------------------------------------------------------

class TestCLI:

    def test_no_command_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 0
        assert "ans104" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            main(["--version"])
        assert "0.1.0" in capsys.readouterr().out

    def test_verify_corrupt(self, tmp_path, capsys):
        path = tmp_path / "short.item"
        path.write_bytes(b"\x01\x00" + bytes(40))
        with pytest.raises(SystemExit) as exc:
            main(["verify", str(path)])
        assert exc.value.code == 2
        assert "CORRUPT" in capsys.readouterr().out

    def test_verify_unknown_type(self, tmp_path, capsys, build_raw):
        path = tmp_path / "odd.item"
        path.write_bytes(bytes(build_raw(code=9999, data=b"x")))
        with pytest.raises(SystemExit) as exc:
            main(["verify", str(path)])
        assert exc.value.code == 2
        assert "unknown_signature_type" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["id", str(tmp_path / "nope.item")])
        assert exc.value.code == 1
        assert "Error" in capsys.readouterr().err

    def test_tags_empty(self, tmp_path, capsys, hello_raw):
        path = tmp_path / "hello.item"
        path.write_bytes(bytes(hello_raw))
        main(["tags", str(path)])
        assert "No tags." in capsys.readouterr().out

    def test_inspect_unsigned(self, tmp_path, capsys, hello_raw):
        path = tmp_path / "hello.item"
        path.write_bytes(bytes(hello_raw))
        main(["inspect", str(path)])
        out = json.loads(capsys.readouterr().out)
        assert out["signature_type"] == 1
        assert out["data"] == "aGVsbG8"
        assert out["tags"] == []

    def test_create_requires_wallet(self, tmp_path, capsys):
        data = tmp_path / "payload.txt"
        data.write_bytes(b"x")
        with pytest.raises(SystemExit) as exc:
            main(["create", str(data), "-o", str(tmp_path / "x.item")])
        assert exc.value.code == 1
        assert "No wallet" in capsys.readouterr().err

    def test_bad_tag_argument(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["create", "d", "-o", "o", "--tag", "novalue"])
        assert exc.value.code == 2

    @skip_no_crypto
    def test_create_and_verify(self, signed_item, capsys):
        main(["verify", str(signed_item)])
        assert "OK" in capsys.readouterr().out

    @skip_no_crypto
    def test_create_prints_id(self, tmp_path, wallet, capsys):
        data = tmp_path / "payload.txt"
        data.write_bytes(b"hello")
        out = tmp_path / "out.item"
        main(["create", str(data), "-o", str(out), "--wallet", str(wallet)])
        printed = capsys.readouterr().out
        assert "Created" in printed

        main(["id", str(out)])
        item_id = capsys.readouterr().out.strip()
        assert f"id: {item_id}" in printed

    @skip_no_crypto
    def test_wallet_from_config(self, tmp_path, wallet, capsys, monkeypatch):
        config = tmp_path / "config.toml"
        config.write_text(f'wallet = "{wallet.as_posix()}"\n')
        data = tmp_path / "payload.txt"
        data.write_bytes(b"cfg")
        out = tmp_path / "cfg.item"
        main(["--config", str(config), "create", str(data), "-o", str(out)])
        assert out.exists()

    @skip_no_crypto
    def test_tampered_fails(self, signed_item, capsys):
        raw = bytearray(signed_item.read_bytes())
        raw[-1] ^= 0xFF
        signed_item.write_bytes(bytes(raw))
        with pytest.raises(SystemExit) as exc:
            main(["verify", str(signed_item)])
        assert exc.value.code == 1
        assert "FAIL" in capsys.readouterr().out

    @skip_no_crypto
    def test_tags_listed(self, signed_item, capsys):
        main(["tags", str(signed_item)])
        out = capsys.readouterr().out
        assert "Content-Type: text/plain" in out
        assert "App: cli-test" in out

    @skip_no_crypto
    def test_inspect_signed(self, signed_item, capsys):
        main(["inspect", str(signed_item)])
        out = json.loads(capsys.readouterr().out)
        assert out["signature_type"] == 2
        assert len(out["tags"]) == 2

    @skip_no_crypto
    def test_bad_target(self, tmp_path, wallet, capsys):
        data = tmp_path / "payload.txt"
        data.write_bytes(b"x")
        with pytest.raises(SystemExit) as exc:
            main([
                "create", str(data), "-o", str(tmp_path / "x.item"),
                "--wallet", str(wallet), "--target", "AAAA",
            ])
        assert exc.value.code == 1
        assert "target" in capsys.readouterr().err

    @skip_no_crypto
    def test_unwritable_output(self, tmp_path, wallet, capsys):
        data = tmp_path / "payload.txt"
        data.write_bytes(b"x")
        out = tmp_path / "missing-dir" / "x.item"
        with pytest.raises(SystemExit) as exc:
            main(["create", str(data), "-o", str(out), "--wallet", str(wallet)])
        assert exc.value.code == 1
        assert "Error" in capsys.readouterr().err
        assert not out.exists()
