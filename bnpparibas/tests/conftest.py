"""
Shared fixtures: canned portal pages served by a fake requests session.
"""
import pytest

from ..core.portal import load_portal


BASE_URL = "https://www.secure.bnpparibas.net"
LOGIN_URL = f"{BASE_URL}/controller?type=auth"

LANDING_HTML = """<html><body>
<form name="esp_form" action="/controller" method="post">
  <input type="hidden" name="type" value="auth">
  <input type="text" name="userid" value="">
  <input type="password" name="password" value="">
  <input type="submit" name="valider" value="OK">
</form>
</body></html>"""

HOME_HTML = "<html><body><p>Bienvenue</p></body></html>"

EXPORT_FORM_HTML = """<html><body>
<form action="/SAF_TLC_RESULT" method="post">
  <select name="ch_rop"><option value="un">Un compte</option><option value="tous">Tous</option></select>
  <input type="hidden" name="ch_rop_fmt_fic" value="QIF">
  <input type="hidden" name="session" value="abc123">
</form>
<form name="search" action="/search"><input name="q"></form>
</body></html>"""

MULTI_VALUE_HTML = """<html><body>
<form action="/SAF_TLC_RESULT" method="post">
  <input type="checkbox" name="compte" value="1" checked>
  <input type="checkbox" name="compte" value="2">
  <input type="checkbox" name="compte" value="3" checked>
  <select name="fmt" multiple>
    <option value="tab" selected>Tab</option><option value="csv" selected>CSV</option><option value="qif">QIF</option>
  </select>
</form>
</body></html>"""

EXPORTS_HTML = """<html><body>
<a href="/download/compte1.exl">Compte cheques</a>
<a href="/aide.html">Aide</a>
<a href="compte2.exl">Livret A</a>
<a href="/download/compte3.exl?x=1">Compte joint</a>
</body></html>"""

ACCOUNT_ONE = (
    "John Doe\t12345 123456789 01\t\t31/12/23\t\t1234,56\n"
    "15/12/23\tCARTE  ACHAT   X\t-12,00\n"
    "20/12/23\tVIREMENT SALAIRE\t2500,00\t\tEUR\n"
)
ACCOUNT_THREE = (
    "Jane Doe\t00042 000000123 09\t31/12/23\t10,00\r\n"
    "02/01/99\tFRAIS\t-1,50\r\n"
)
NO_ACTIVITY_HTML = "<HTML><BODY>Aucune operation sur la periode</BODY></HTML>"


class FakeResponse:
    """The subset of requests.Response read by the page loader."""

    def __init__(self, text: str = "", status_code: int = 200, url: str = None, reason: str = "OK"):
        self.text = text
        self.content = text.encode("utf-8")
        self.status_code = status_code
        self.url = url
        self.reason = reason


class FakeSession:
    """
    Serves canned responses keyed by (method, url).

    A route may hold a list of responses, consumed one per request; the last
    one is repeated once the list runs out. Every request is recorded.
    """

    def __init__(self):
        self.headers = {}
        self.routes = {}
        self.calls = []

    def add(self, method: str, url: str, *responses):
        self.routes[(method, url)] = list(responses)

    def get(self, url, params=None, timeout=None, **kwargs):
        return self._respond("GET", url, params, timeout)

    def post(self, url, data=None, timeout=None, **kwargs):
        return self._respond("POST", url, data, timeout)

    def _respond(self, method, url, payload, timeout):
        self.calls.append({
            "method": method,
            "url": url,
            "payload": dict(payload or {}),
            "pairs": list(payload or []),
            "headers": dict(self.headers),
            "timeout": timeout,
        })
        queue = self.routes.get((method, url))
        if not queue:
            return FakeResponse("Not Found", status_code=404, url=url, reason="Not Found")

        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        if response.url is None:
            response.url = url
        return response

    def urls(self, method: str = None):
        return [call["url"] for call in self.calls if method is None or call["method"] == method]


@pytest.fixture
def portal():
    """The bundled BNPNet portal table."""
    return load_portal()


@pytest.fixture
def fake_session():
    """A fake session wired with a complete, successful portal visit."""
    session = FakeSession()
    session.add("GET", LOGIN_URL, FakeResponse(LANDING_HTML))
    session.add("POST", f"{BASE_URL}/controller", FakeResponse(HOME_HTML))
    session.add("GET", f"{BASE_URL}/SAF_TLC", FakeResponse(EXPORT_FORM_HTML))
    session.add("POST", f"{BASE_URL}/SAF_TLC_RESULT", FakeResponse(EXPORTS_HTML))
    session.add("GET", f"{BASE_URL}/download/compte1.exl", FakeResponse(ACCOUNT_ONE))
    session.add("GET", f"{BASE_URL}/compte2.exl", FakeResponse(NO_ACTIVITY_HTML))
    session.add("GET", f"{BASE_URL}/download/compte3.exl?x=1", FakeResponse(ACCOUNT_THREE))
    return session
