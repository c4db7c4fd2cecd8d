from typing import Dict, Optional

import requests

DEFAULT_USER_AGENT = "bskyclient/1.0 (+https://bsky.app)"


class SessionFactory:
    """A reusable factory for creating and managing a single `requests` session.

    The `SessionFactory` class keeps one `requests.Session` instance for every
    XRPC call a client makes, so connection pooling and the User-Agent header
    are shared. Requests are sent exactly once; retry policy is left to the caller.

    Attributes:
        session (requests.Session): The `requests.Session` instance managed by the factory.
        headers (dict): Default headers applied when the session is created.

    Methods:
        get():
            Returns the existing `requests.Session` instance or creates a new one if none exists.

    """

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, headers: Optional[Dict[str, str]] = None):
        """Initializes the SessionFactory with no active session."""
        self.session = None
        self.headers = {"User-Agent": user_agent}
        if headers:
            self.headers.update(headers)

    def get(self) -> requests.Session:
        """Retrieves the managed `requests.Session` instance.

        If a session does not already exist, a new `requests.Session` instance is created
        and returned. Subsequent calls will return the same session instance.

        Returns:
            requests.Session: The managed `requests.Session` instance.

        Example Usage:
            session_factory = SessionFactory()
            session = session_factory.get()
            response = session.post("https://bsky.social/xrpc/com.atproto.server.createSession", json=...)

        """
        if self.session is None:
            self.session = requests.Session()
            self.session.headers.update(self.headers)
        return self.session

    def close(self) -> None:
        """Closes the managed session, if any. A later get() opens a new one."""
        if self.session is not None:
            self.session.close()
            self.session = None
