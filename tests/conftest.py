import json

import httpx
import pytest

from adapters.session_store import StaticSessionProvider
from core.config import AppSettings
from core.domain.models import Session
from core.services.branding import BrandingService

HOST = "vcd.example.com"
UPLOAD_LINK = f"https://{HOST}/transfer/abc/custom.css"


class FakeCloudDirector:
    """In-memory stand-in for the remote branding API, served through MockTransport."""

    def __init__(self, versions=("31.0", "32.0", "33.0"), deprecated=()):
        self.versions = list(versions)
        self.deprecated = set(deprecated)
        self.requests: list[httpx.Request] = []
        self.branding = {
            "portalName": "A",
            "portalColor": "#111111",
            "selectedTheme": {"name": "Default", "themeType": "BUILT_IN"},
            "customLinks": [{"name": "Help", "menuItemType": "link", "url": "https://help.example.com"}],
        }
        self.tenant_branding: dict[str, dict] = {}
        self.themes = [
            {"name": "Default", "themeType": "BUILT_IN"},
            {"name": "Dark", "themeType": "BUILT_IN"},
        ]
        self.css: dict[str, bytes] = {}
        self.registered: list[dict] = []
        self.upload_link_header = f'<{UPLOAD_LINK}>;rel="upload:default";type="application/octet-stream"'
        self.logo = b"\x89PNG-logo"
        self.icon = b"\x89PNG-icon"
        self.failures: dict[tuple[str, str], int] = {}
        self.themes_envelope = False

    @property
    def api_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path != "/api/versions"]

    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.api_requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method, path = request.method, request.url.path

        status = self.failures.get((method, path))
        if status is not None:
            return httpx.Response(status, json={"message": f"simulated {status}"})

        if path == "/api/versions":
            return httpx.Response(
                200,
                json={
                    "versionInfo": [
                        {"version": v, "deprecated": v in self.deprecated} for v in self.versions
                    ]
                },
            )

        if path == "/cloudapi/branding":
            if method == "GET":
                return httpx.Response(200, json=self.branding)
            if method == "PUT":
                self.branding = json.loads(request.content)
                return httpx.Response(200, json=self.branding)

        if path.startswith("/cloudapi/branding/tenant/"):
            rest = path[len("/cloudapi/branding/tenant/"):]
            tenant, _, asset = rest.partition("/")
            if not asset:
                if method == "GET":
                    return httpx.Response(200, json=self.tenant_branding.get(tenant, self.branding))
                if method == "PUT":
                    self.tenant_branding[tenant] = json.loads(request.content)
                    return httpx.Response(200, json=self.tenant_branding[tenant])
            if asset in ("logo", "icon"):
                return self._image(asset, request)

        if path == "/cloudapi/branding/themes" and method == "GET":
            if self.themes_envelope:
                return httpx.Response(200, json={"resultTotal": len(self.themes), "values": self.themes})
            return httpx.Response(200, json=self.themes)

        if path == "/cloudapi/branding/themes/" and method == "POST":
            body = json.loads(request.content)
            self.themes.append({"name": body["name"], "themeType": "CUSTOM"})
            return httpx.Response(200, json=self.themes[-1])

        if path.startswith("/cloudapi/branding/themes/"):
            rest = path[len("/cloudapi/branding/themes/"):]
            name, _, sub = rest.partition("/")
            if not sub and method == "DELETE":
                self.themes = [t for t in self.themes if t["name"] != name]
                return httpx.Response(204)
            if sub == "contents" and method == "POST":
                self.registered.append(json.loads(request.content))
                headers = {"Link": self.upload_link_header} if self.upload_link_header else {}
                return httpx.Response(200, headers=headers)
            if sub == "css" and method == "GET":
                if name not in self.css:
                    return httpx.Response(404, json={"message": "no css"})
                return httpx.Response(200, content=self.css[name], headers={"Content-Type": "text/css"})

        if str(request.url) == UPLOAD_LINK and method == "PUT":
            self.css["uploaded"] = request.content
            return httpx.Response(200)

        if path in ("/cloudapi/branding/logo", "/cloudapi/branding/icon"):
            return self._image(path.rsplit("/", 1)[-1], request)

        return httpx.Response(404, json={"message": f"no route for {method} {path}"})

    def _image(self, kind: str, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, content=getattr(self, kind), headers={"Content-Type": "image/png"})
        if request.method == "PUT":
            setattr(self, kind, request.content)
            return httpx.Response(204)
        return httpx.Response(405)


@pytest.fixture
def fake():
    return FakeCloudDirector()


@pytest.fixture
def session():
    return Session(endpoint=HOST, token="secret-token")


@pytest.fixture
def settings(tmp_path):
    return AppSettings(sessions_path=tmp_path / "sessions.json")


@pytest.fixture
def make_service(session, settings):
    def _make(fake: FakeCloudDirector, sessions=None) -> BrandingService:
        provider = StaticSessionProvider(sessions if sessions is not None else [session])
        return BrandingService(provider, settings, transport=httpx.MockTransport(fake.handler))

    return _make


@pytest.fixture
def service(fake, make_service):
    return make_service(fake)
