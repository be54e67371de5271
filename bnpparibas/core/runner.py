"""
End-to-end session orchestration: login, export request and download.
"""
from pathlib import Path
from typing import List, Optional, Union
from urllib.parse import urljoin, urlsplit
import logging

import requests

from .errors import ConfigurationError, ParseError, SessionError
from .export import ParsePolicy, parse_account
from .loader import Page, PortalClient
from .portal import load_portal
from ..models.schema import AccountRecord, BalanceReport, PortalConfig

logger = logging.getLogger(__name__)


class BalanceChecker:
    """Drives one portal session from the landing page to the parsed accounts."""

    def __init__(self, portal: PortalConfig, client: requests.Session = None,
                 policy: ParsePolicy = ParsePolicy.FAIL_FAST, verbose: bool = False):
        self.portal = portal
        self.client = PortalClient(portal, client)
        self.policy = ParsePolicy(policy)

        if verbose:
            logging.basicConfig(level=logging.DEBUG)

    def run(self, username: str, password: str) -> BalanceReport:
        """
        Log in, request the export and parse every account file.

        Args:
            username: Portal user id
            password: Portal password

        Returns:
            BalanceReport with the accounts in link order
        """
        landing = self._open_landing_page()
        home = self._login(landing, username, password)
        exports = self._request_export(home)

        links = self._export_links(exports)
        logger.info(f"Found {len(links)} export links")

        report = BalanceReport()
        for url in links:
            account = self._download_account(url, report)
            if account is not None:
                report.accounts.append(account)

        logger.info(f"Parsed {len(report.accounts)} accounts")
        return report

    def _open_landing_page(self) -> Page:
        """Fetch the login page, retrying while the portal answers with an empty body."""
        url = self.portal.login_url
        retries = self.portal.empty_response_retries

        for attempt in range(1, retries + 1):
            page = self.client.get(url)
            if not page.is_empty:
                logger.info(f"Landing page fetched after {attempt} attempt(s)")
                return page
            logger.warning(f"Empty response from landing page (attempt {attempt}/{retries})")

        raise SessionError(f"Site unreachable or empty response after {retries} attempts", url=url)

    def _login(self, landing: Page, username: str, password: str) -> Page:
        """Fill in and submit the login form."""
        login_form = self.portal.login_form
        form = landing.find_form(name=login_form.name)
        if form is None:
            raise SessionError(f"Login form not found: {login_form.name}", url=landing.url)

        fields = dict(login_form.extra_fields)
        fields[login_form.username_field] = username
        fields[login_form.password_field] = password

        home = self.client.submit(landing, form, fields)
        logger.info("Login form submitted")

        self.client.add_headers(self.portal.post_login_headers)
        return home

    def _request_export(self, home: Page) -> Page:
        """Open the export page and submit its form with the configured options."""
        export_url = urljoin(home.url, self.portal.export_path)
        page = self.client.get(export_url)

        export_form = self.portal.export_form
        form = page.find_form(index=export_form.index)
        if form is None:
            raise SessionError("Export form not found", url=page.url)

        exports = self.client.submit(page, form, export_form.fields)
        logger.info("Export requested")
        return exports

    def _export_links(self, page: Page) -> List[str]:
        """Links on the page whose path ends with the export file suffix."""
        suffix = self.portal.export_link_suffix
        return [url for url in page.links() if urlsplit(url).path.endswith(suffix)]

    def _download_account(self, url: str, report: BalanceReport) -> Optional[AccountRecord]:
        """Fetch one export file and parse it, or return None for an account without activity."""
        page = self.client.get(url)

        if self.portal.no_activity_marker.lower() in page.text.lower():
            logger.info(f"No activity for {url}, skipping")
            return None

        diagnostics: List[ParseError] = []
        try:
            account = parse_account(page.text, self.policy, diagnostics)
        except ParseError as e:
            if self.policy != ParsePolicy.SKIP:
                raise
            logger.warning(f"Skipping account from {url}: {e}")
            diagnostics.append(e)
            account = None

        report.diagnostics.extend(str(e) for e in diagnostics)
        return account


def _check_credentials(username: Optional[str], password: Optional[str]):
    """Both credentials must be given; an empty string counts as missing."""
    if not password:
        raise ConfigurationError("Must provide a password")
    if not username:
        raise ConfigurationError("Must provide a username")


def fetch_report(username: Optional[str] = None, password: Optional[str] = None,
                 client: requests.Session = None, *,
                 portal: Union[PortalConfig, str, Path, None] = None,
                 policy: ParsePolicy = ParsePolicy.FAIL_FAST,
                 verbose: bool = False) -> BalanceReport:
    """
    Check balances and collect statements, with control over parse failures.

    Args:
        username: Portal user id; required
        password: Portal password; required
        client: Pre-configured requests session to use instead of a new one
        portal: Portal table, or a path to one; defaults to the bundled BNPNet table
        policy: FAIL_FAST raises on the first bad line, SKIP records it and continues
        verbose: Enable verbose logging

    Returns:
        BalanceReport object

    Raises:
        ConfigurationError: if username or password is missing or empty
    """
    _check_credentials(username, password)
    checker = BalanceChecker(load_portal(portal), client, policy, verbose)
    return checker.run(username, password)


def check_balance(username: Optional[str] = None, password: Optional[str] = None,
                  client: requests.Session = None, *,
                  portal: Union[PortalConfig, str, Path, None] = None,
                  verbose: bool = False) -> List[AccountRecord]:
    """
    Return one AccountRecord per bank account, in export link order.

    Args:
        username: Portal user id; required
        password: Portal password; required
        client: Pre-configured requests session to use instead of a new one
        portal: Portal table, or a path to one; defaults to the bundled BNPNet table
        verbose: Enable verbose logging

    Returns:
        List of AccountRecord objects

    Raises:
        ConfigurationError: if username or password is missing or empty
    """
    report = fetch_report(username, password, client, portal=portal,
                          policy=ParsePolicy.FAIL_FAST, verbose=verbose)
    return report.accounts
