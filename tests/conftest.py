"""Shared test fixtures for offlinebundle.

Network and subprocess collaborators are replaced with in-process fakes:
``FakeSession`` serves canned HTTP responses and ``ScriptedRunner``
performs tar/unzip/gunzip/bun with the standard library.
"""

from __future__ import annotations

import gzip
import io
import json
import tarfile
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from offlinebundle.config import BundleSettings
from offlinebundle.core.manifest import build_manifest, write_manifest
from offlinebundle.core.process import ProcessResult
from offlinebundle.models.target import KNOWN_TARGETS

RIPGREP_URL = (
    "https://github.com/BurntSushi/ripgrep/releases/download/14.1.1/"
    "ripgrep-14.1.1-x86_64-unknown-linux-musl.tar.gz"
)
CLANGD_API = "https://api.github.com/repos/clangd/clangd/releases/latest"
RUST_ANALYZER_API = "https://api.github.com/repos/rust-lang/rust-analyzer/releases/latest"
CLANGD_TAG = "19.1.2"
RUST_ANALYZER_TAG = "2026-10-13"

INSTALLED_PACKAGES = {
    "pyright": "1.1.407",
    "typescript": "5.9.3",
    "typescript-language-server": "5.0.1",
    "opencode-anthropic-auth": "0.0.9",
    "@gitlab/opencode-gitlab-auth": "1.3.0",
    "@aws-sdk/credential-providers": "3.913.0",
    "@opencode-ai/plugin": "0.15.3",
}


# ---------------------------------------------------------------------------
# Archive builders
# ---------------------------------------------------------------------------


def make_tar_gz(entries: dict[str, bytes], mode: int = 0o644) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, data in entries.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = mode
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def make_zip(entries: dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# HTTP fake
# ---------------------------------------------------------------------------


class FakeResponse:
    def __init__(self, status_code: int = 200, body: bytes = b"", reason: str = "") -> None:
        self.status_code = status_code
        self.body = body
        self.reason = reason or ("OK" if status_code < 400 else "Not Found")

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def iter_content(self, chunk_size: int = 1):
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i : i + chunk_size]

    def json(self) -> Any:
        return json.loads(self.body)

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        return None


class FakeSession:
    """Serves canned responses by URL; unknown URLs are 404s."""

    def __init__(self, routes: dict[str, FakeResponse] | None = None) -> None:
        self.routes = dict(routes or {})
        self.requests: list[tuple[str, dict[str, str]]] = []

    def add(self, url: str, body: bytes | dict, status: int = 200) -> None:
        if isinstance(body, dict):
            body = json.dumps(body).encode("utf-8")
        self.routes[url] = FakeResponse(status, body)

    def get(self, url: str, headers: dict[str, str] | None = None, **kwargs: Any) -> FakeResponse:
        self.requests.append((url, dict(headers or {})))
        return self.routes.get(url, FakeResponse(404, b""))


# ---------------------------------------------------------------------------
# Process fake
# ---------------------------------------------------------------------------


class ScriptedRunner:
    """Implements the external tools the pipeline calls, in-process.

    ``failures`` maps a program name to ``(returncode, stderr)``.
    """

    def __init__(
        self,
        failures: dict[str, tuple[int, bytes]] | None = None,
        installed: dict[str, str] | None = None,
    ) -> None:
        self.failures = failures or {}
        self.installed = INSTALLED_PACKAGES if installed is None else installed
        self.calls: list[list[str]] = []

    def run(self, args, *, cwd: Path | None = None, capture: bool = True) -> ProcessResult:
        argv = [str(a) for a in args]
        self.calls.append(argv)
        program = argv[0]
        if program in self.failures:
            code, stderr = self.failures[program]
            return ProcessResult(args=argv, returncode=code, stderr=stderr)
        handler = getattr(self, f"_{program}", None)
        if handler is None:
            return ProcessResult(args=argv, returncode=127, stderr=b"command not found")
        stdout = handler(argv[1:], cwd) or b""
        return ProcessResult(args=argv, returncode=0, stdout=stdout)

    def _tar(self, args: list[str], cwd: Path | None) -> None:
        if args[0] == "-czf":
            base = Path(cwd or ".")
            with tarfile.open(base / args[1], "w:gz") as tar:
                tar.add(base / args[2], arcname=args[2])
            return
        archive, dest = Path(args[1]), Path(args[3])
        strip = 0
        for arg in args[4:]:
            if arg.startswith("--strip-components="):
                strip = int(arg.split("=", 1)[1])
        with tarfile.open(archive, "r:gz") as tar:
            for member in tar.getmembers():
                parts = member.name.split("/")[strip:]
                if not parts or not member.isfile():
                    continue
                target = dest.joinpath(*parts)
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(tar.extractfile(member).read())

    def _unzip(self, args: list[str], cwd: Path | None) -> None:
        archive, dest = Path(args[2]), Path(args[4])
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(dest)

    def _gunzip(self, args: list[str], cwd: Path | None) -> bytes:
        return gzip.decompress(Path(args[1]).read_bytes())

    def _bun(self, args: list[str], cwd: Path | None) -> None:
        if args[0] != "add":
            # host build steps; output comes from the host_build_dir fixture
            return
        root = Path(args[args.index("--cwd") + 1])
        specs = args[args.index("--cwd") + 2 :]
        pkg_json = root / "package.json"
        declared = json.loads(pkg_json.read_text())
        for spec in specs:
            at = spec.rfind("@")
            name = spec[:at] if at > 0 else spec
            version = self.installed.get(name, "0.0.0")
            declared.setdefault("dependencies", {})[name] = f"^{version}"
            pkg_dir = root / "node_modules" / name
            pkg_dir.mkdir(parents=True, exist_ok=True)
            (pkg_dir / "package.json").write_text(
                json.dumps({"name": name, "version": version})
            )
        pkg_json.write_text(json.dumps(declared, indent=2))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def settings(tmp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> BundleSettings:
    """Settings rooted in a temp directory, isolated from the environment."""
    for var in ("BUNDLE_VERSION", "BUNDLE_COMMIT_SHA"):
        monkeypatch.delenv(var, raising=False)
    return BundleSettings(
        deps_dir=tmp_dir / "dist" / "offline-deps",
        dist_dir=tmp_dir / "dist",
        native_library_path=tmp_dir / "native" / "libopentui.so",
        host_source_dir=tmp_dir / "host",
        _env_file=None,
    )


@pytest.fixture
def linux_x64():
    return KNOWN_TARGETS["linux-x64"]


@pytest.fixture
def clangd_release() -> dict[str, Any]:
    base = f"https://github.com/clangd/clangd/releases/download/{CLANGD_TAG}"
    names = [
        f"clangd-linux-{CLANGD_TAG}.zip",
        f"clangd-mac-{CLANGD_TAG}.zip",
        f"clangd-windows-{CLANGD_TAG}.zip",
        f"clangd_indexing_tools-linux-{CLANGD_TAG}.zip",
    ]
    return {
        "tag_name": CLANGD_TAG,
        "name": f"{CLANGD_TAG}",
        "assets": [{"name": n, "browser_download_url": f"{base}/{n}", "size": 1} for n in names],
    }


@pytest.fixture
def rust_analyzer_release() -> dict[str, Any]:
    base = f"https://github.com/rust-lang/rust-analyzer/releases/download/{RUST_ANALYZER_TAG}"
    names = [
        "rust-analyzer-aarch64-unknown-linux-gnu.gz",
        "rust-analyzer-x86_64-unknown-linux-gnu.gz",
        "rust-analyzer-x86_64-unknown-linux-musl.gz",
        "rust-analyzer-x86_64-pc-windows-msvc.zip",
    ]
    return {
        "tag_name": RUST_ANALYZER_TAG,
        "assets": [{"name": n, "browser_download_url": f"{base}/{n}"} for n in names],
    }


@pytest.fixture
def upstream(clangd_release, rust_analyzer_release) -> FakeSession:
    """A FakeSession serving every upstream artifact for linux-x64."""
    session = FakeSession()
    session.add(
        RIPGREP_URL,
        make_tar_gz({
            "ripgrep-14.1.1-x86_64-unknown-linux-musl/rg": b"#!rg\n",
            "ripgrep-14.1.1-x86_64-unknown-linux-musl/doc/rg.1": b"man page",
        }),
    )
    session.add(CLANGD_API, clangd_release)
    session.add(
        clangd_release["assets"][0]["browser_download_url"],
        make_zip({
            f"clangd_{CLANGD_TAG}/bin/clangd": b"#!clangd\n",
            f"clangd_{CLANGD_TAG}/lib/clang/19/include/stddef.h": b"/* */",
        }),
    )
    session.add(RUST_ANALYZER_API, rust_analyzer_release)
    session.add(
        rust_analyzer_release["assets"][1]["browser_download_url"],
        gzip.compress(b"#!rust-analyzer\n"),
    )
    return session


@pytest.fixture
def runner() -> ScriptedRunner:
    return ScriptedRunner()


@pytest.fixture
def make_deps_root() -> Callable[..., Path]:
    """Factory fixture: materialize a complete dependency root with manifest."""

    def _factory(root: Path, created: str = "2026-10-19T08:00:00.000Z") -> Path:
        files = {
            "ripgrep/rg": b"#!rg\n",
            "lsp/clangd/bin/clangd": b"#!clangd\n",
            "lsp/rust-analyzer/bin/rust-analyzer": b"#!ra\n",
            "node_modules/pyright/package.json": b'{"version": "1.1.407"}',
            "node_modules/typescript/package.json": b'{"version": "5.9.3"}',
        }
        for rel, data in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            if "node_modules" not in rel:
                path.chmod(0o755)
        manifest = build_manifest(
            ripgrep="14.1.1",
            clangd=CLANGD_TAG,
            rust_analyzer=RUST_ANALYZER_TAG,
            npm_packages={"pyright": "1.1.407", "typescript": "5.9.3"},
            target=KNOWN_TARGETS["linux-x64"],
            created=created,
        )
        write_manifest(manifest, root / "manifest.json")
        return root

    return _factory


@pytest.fixture
def host_build_dir(tmp_dir: Path) -> Path:
    """A prebuilt host output dir whose binary echoes its env and args."""
    build = tmp_dir / "host" / "dist" / "opencode-linux-x64"
    (build / "bin").mkdir(parents=True)
    binary = build / "bin" / "opencode"
    binary.write_text(
        "#!/bin/bash\n"
        'echo "OFFLINE_MODE=$OPENCODE_OFFLINE_MODE"\n'
        'echo "DEPS_PATH=$OPENCODE_OFFLINE_DEPS_PATH"\n'
        'echo "DISABLE_AUTOUPDATE=$OPENCODE_DISABLE_AUTOUPDATE"\n'
        'echo "DISABLE_LSP_DOWNLOAD=$OPENCODE_DISABLE_LSP_DOWNLOAD"\n'
        'echo "DISABLE_MODELS_FETCH=$OPENCODE_DISABLE_MODELS_FETCH"\n'
        'printf "ARG=%s\\n" "$@"\n'
    )
    binary.chmod(0o755)
    return build


@pytest.fixture
def native_library(settings: BundleSettings) -> Path:
    path = settings.native_library_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x7fELF native")
    return path


@pytest.fixture
def fake_session() -> FakeSession:
    """An empty FakeSession; every URL is a 404 until added."""
    return FakeSession()


@pytest.fixture
def make_runner() -> Callable[..., ScriptedRunner]:
    """Factory fixture: build a ScriptedRunner with optional failures."""

    def _factory(**kwargs: Any) -> ScriptedRunner:
        return ScriptedRunner(**kwargs)

    return _factory


@pytest.fixture
def tar_gz() -> Callable[..., bytes]:
    """Factory fixture: build .tar.gz bytes from a {path: bytes} mapping."""
    return make_tar_gz


@pytest.fixture
def zip_bytes() -> Callable[[dict[str, bytes]], bytes]:
    """Factory fixture: build .zip bytes from a {path: bytes} mapping."""
    return make_zip
