"""
Page fetching, form discovery and link enumeration using requests and lxml.
"""
import platform
from typing import Dict, List, Optional, Tuple
from urllib.parse import urljoin
import logging

import requests
import lxml.html
from lxml import etree

from .. import __version__
from .errors import SessionError
from ..models.schema import PortalConfig

logger = logging.getLogger(__name__)

# Element tags followed as links, with the attribute holding the target.
LINK_ATTRIBUTES = {
    'a': 'href',
    'area': 'href',
    'frame': 'src',
    'iframe': 'src',
}
SUBMIT_TYPES = ('submit', 'image')


class Page:
    """A fetched page: its final URL, status and body."""

    def __init__(self, url: str, status_code: int, text: str, content: bytes = None):
        self.url = url
        self.status_code = status_code
        self.text = text or ''
        self.content = content if content is not None else self.text.encode('utf-8')
        self._document = None

    def __repr__(self):
        return f"Page('{self.url}', status={self.status_code}, length={len(self.text)})"

    @property
    def is_empty(self) -> bool:
        return not self.text

    @property
    def document(self) -> Optional[lxml.html.HtmlElement]:
        """The parsed HTML document, or None if the body is not parseable."""
        if self._document is None and self.content.strip():
            try:
                self._document = lxml.html.fromstring(self.content, base_url=self.url)
            except (etree.ParserError, ValueError) as e:
                logger.debug(f"Could not parse {self.url} as HTML: {e}")
        return self._document

    def find_form(self, name: str = None, index: int = None) -> Optional[lxml.html.FormElement]:
        """
        Find a form by its name (or id), or by its position on the page.

        Args:
            name: Value of the form's name or id attribute
            index: Zero-based position among the page's forms

        Returns:
            The form element, or None if the page has no such form
        """
        document = self.document
        if document is None:
            return None

        forms = document.forms
        if name is not None:
            for form in forms:
                if name in (form.get('name'), form.get('id')):
                    return form
            return None

        if index is not None and 0 <= index < len(forms):
            return forms[index]
        return None

    def links(self) -> List[str]:
        """Absolute URLs of every hyperlink and frame on the page, in document order."""
        document = self.document
        if document is None:
            return []

        urls = []
        for element in document.iter(*LINK_ATTRIBUTES):
            target = element.get(LINK_ATTRIBUTES[element.tag])
            if target and target.strip():
                urls.append(urljoin(self.url, target.strip()))
        return urls


def form_fields(form: lxml.html.FormElement, overrides: Dict[str, str]) -> List[Tuple[str, str]]:
    """
    Build the name/value pairs a browser would submit for a form.

    The form's own controls come first, in document order and keeping every
    value of a repeated name (checkbox groups, multiple selects), then the
    first named submit button. An override replaces every value of its name;
    overrides not present in the markup are appended.
    """
    fields = list(form.form_values())

    for control in form.inputs:
        if control.get('type', '').lower() in SUBMIT_TYPES and control.get('name'):
            name = control.get('name')
            if all(key != name for key, _ in fields):
                fields.append((name, control.get('value', '')))
            break

    fields = [(key, value) for key, value in fields if key not in overrides]
    fields.extend(overrides.items())
    return fields


class PortalClient:
    """Thin wrapper over a requests session that turns responses into Pages."""

    def __init__(self, portal: PortalConfig, session: requests.Session = None):
        self.portal = portal
        self.session = session if session is not None else build_session(portal)

    def get(self, url: str) -> Page:
        """Fetch a URL with GET."""
        return self._request('GET', url)

    def submit(self, page: Page, form: lxml.html.FormElement, overrides: Dict[str, str]) -> Page:
        """
        Submit a form found on a page.

        Args:
            page: Page the form was found on
            form: Form element
            overrides: Field values to set on top of the form's own

        Returns:
            The page returned by the submission
        """
        action = form.action or page.url
        fields = form_fields(form, overrides)
        logger.debug(f"Submitting form {form.get('name') or '#'} to {action} ({len(fields)} fields)")

        if form.method == 'POST':
            return self._request('POST', action, data=fields)
        return self._request('GET', action, params=fields)

    def add_headers(self, headers: Dict[str, str]):
        """Add headers sent with every later request."""
        self.session.headers.update(headers)

    def _request(self, method: str, url: str, **kwargs) -> Page:
        logger.debug(f"{method} {url}")
        try:
            if method == 'POST':
                response = self.session.post(url, timeout=self.portal.timeout, **kwargs)
            else:
                response = self.session.get(url, timeout=self.portal.timeout, **kwargs)
        except requests.RequestException as e:
            raise SessionError(f"{method} request failed: {e}", url=url) from e

        if response.status_code >= 400:
            raise SessionError(f"HTTP {response.status_code} {response.reason}", url=url)

        return Page(
            url=response.url or url,
            status_code=response.status_code,
            text=response.text,
            content=response.content
        )


def build_session(portal: PortalConfig) -> requests.Session:
    """Create a requests session carrying the portal's User-Agent."""
    session = requests.Session()
    session.headers['User-Agent'] = portal.user_agent.format(
        version=__version__,
        platform=platform.system().lower() or 'unknown'
    )
    return session
