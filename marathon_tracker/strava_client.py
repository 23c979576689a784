"""Strava API client and sync of runs into the training log."""

import logging
import secrets
import time
from datetime import date, datetime, time as dt_time, timedelta, timezone
from typing import Dict, List, Optional, Iterator, Tuple
from http.server import HTTPServer, BaseHTTPRequestHandler
from urllib.parse import urlencode, urlparse, parse_qs

import requests

from .config import StravaConfig
from .models import (
    ActivityType,
    CompletionStatus,
    DayName,
    StravaActivity,
    WorkoutCompletion,
)
from .parsers import format_duration
from .plan import slot_for_date
from .store import CompletionStore, ExpiringStore


logger = logging.getLogger(__name__)

OAUTH_STATE_TTL = 600
TOKEN_EXPIRY_MARGIN = 60
DEFAULT_TOKEN_LIFETIME = 6 * 3600


class StravaClient:
    """Client for interacting with the Strava API."""

    def __init__(self, config: StravaConfig, tokens: Optional[ExpiringStore] = None):
        """
        Initialize Strava client with configuration.

        Parameters:
            config: Strava settings.
            tokens: Cache for the short-lived access token.
        """
        self._config = config
        self._refresh_token = config.refresh_token
        self._tokens = tokens if tokens is not None else ExpiringStore()

    def _refresh_access_token(self) -> str:
        """
        Refresh OAuth access token using refresh token.
        """
        if not self._refresh_token:
            raise ValueError(
                "No Strava refresh token. Run the 'auth' command and set "
                "STRAVA_REFRESH_TOKEN."
            )

        response = requests.post(
            self._config.token_url,
            data={
                "client_id": self._config.client_id,
                "client_secret": self._config.client_secret,
                "refresh_token": self._refresh_token,
                "grant_type": "refresh_token",
            },
            timeout=30,
        )
        response.raise_for_status()
        data = response.json()

        # strava may rotate the refresh token
        self._refresh_token = data.get("refresh_token", self._refresh_token)

        if "expires_at" in data:
            lifetime = data["expires_at"] - time.time()
        else:
            lifetime = data.get("expires_in", DEFAULT_TOKEN_LIFETIME)

        token = data["access_token"]
        self._tokens.set("access_token", token, max(lifetime - TOKEN_EXPIRY_MARGIN, 0))
        logger.info("Successfully refreshed Strava access token")
        return token

    @property
    def access_token(self) -> str:
        """
        Get current access token, refreshing if it is missing or expired.
        """
        token = self._tokens.get("access_token")
        if token is None:
            token = self._refresh_access_token()
        return token

    def _get_headers(self) -> dict:
        """Build authorization headers for API requests."""
        return {"Authorization": f"Bearer {self.access_token}"}

    def fetch_activities_page(
        self, per_page: int = 100, page: int = 1, after: Optional[int] = None
    ) -> List[dict]:
        """
        Fetch a single page of activities, optionally only those
        starting after the given epoch timestamp.
        """
        params = {"per_page": per_page, "page": page}
        if after is not None:
            params["after"] = after

        response = requests.get(
            f"{self._config.api_base}/athlete/activities",
            headers=self._get_headers(),
            params=params,
            timeout=30,
        )
        response.raise_for_status()
        return response.json()

    def fetch_activities_since(self, start: date) -> Iterator[StravaActivity]:
        """
        Fetch all activities since a date with automatic pagination.

        The API filters on UTC start time while runs are dated locally,
        so the cutoff is a day early and callers drop anything before
        ``start`` themselves.
        """
        cutoff = datetime.combine(start, dt_time.min, tzinfo=timezone.utc) - timedelta(days=1)
        after = int(cutoff.timestamp())
        page = 1
        while True:
            logger.info(f"Fetching activities page {page}")
            raw_activities = self.fetch_activities_page(per_page=100, page=page, after=after)

            if not raw_activities:
                break

            for raw in raw_activities:
                try:
                    yield StravaActivity.from_strava_api(raw)
                except (KeyError, ValueError) as e:
                    logger.warning(f"Failed to parse activity: {e}")

            page += 1


def build_authorization_url(config: StravaConfig, state: str, redirect_uri: str) -> str:
    """Build the Strava consent URL for the authorization code flow."""
    query = urlencode(
        {
            "client_id": config.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": "read,activity:read_all",
            "state": state,
        }
    )
    return f"{config.auth_url}?{query}"


def exchange_code(config: StravaConfig, code: str) -> dict:
    """Exchange an authorization code for access and refresh tokens."""
    response = requests.post(
        config.token_url,
        data={
            "client_id": config.client_id,
            "client_secret": config.client_secret,
            "code": code,
            "grant_type": "authorization_code",
        },
        timeout=30,
    )
    response.raise_for_status()
    return response.json()


def new_oauth_state(states: ExpiringStore) -> str:
    """Create a single-use state nonce that expires after OAUTH_STATE_TTL."""
    state = secrets.token_urlsafe(16)
    states.set(state, True, OAUTH_STATE_TTL)
    return state


def consume_oauth_state(states: ExpiringStore, state: Optional[str]) -> bool:
    """Check a callback's state nonce; each nonce is accepted once."""
    if not state:
        return False
    return states.pop(state) is not None


def run_oauth_flow(config: StravaConfig, states: Optional[ExpiringStore] = None) -> Optional[str]:
    """
    Run OAuth authorization flow to obtain refresh token.

    Starts a local server to capture the OAuth callback and
    exchanges the authorization code for tokens.
    """
    if states is None:
        states = ExpiringStore()

    auth_code: Optional[str] = None
    port = config.redirect_port

    class CallbackHandler(BaseHTTPRequestHandler):
        """HTTP handler to capture OAuth callback."""

        def do_GET(self):
            nonlocal auth_code
            query = parse_qs(urlparse(self.path).query)
            state = query.get("state", [None])[0]

            if "code" in query and consume_oauth_state(states, state):
                auth_code = query["code"][0]
                self.send_response(200)
                self.send_header("Content-type", "text/html")
                self.end_headers()
                self.wfile.write(b"<h1>Success! You can close this window.</h1>")
            else:
                self.send_response(400)
                self.end_headers()
                self.wfile.write(b"Error: missing code or invalid state")

        def log_message(self, format, *args):
            pass  # suppress server logs

    redirect_uri = f"http://localhost:{port}/callback"
    auth_url = build_authorization_url(config, new_oauth_state(states), redirect_uri)

    print(f"\n1. Open this URL in your browser:\n{auth_url}\n")
    print("2. Authorize the application")
    print(f"3. Waiting for callback on port {port}...")

    server = HTTPServer(("localhost", port), CallbackHandler)
    server.handle_request()
    server.server_close()

    if auth_code is None:
        logger.error("Strava authorization failed: no valid callback received")
        return None

    print("\nExchanging authorization code for tokens...")
    tokens = exchange_code(config, auth_code)

    print("\n" + "=" * 50)
    print("Add this to your .env file:")
    print("=" * 50)
    print(f"STRAVA_REFRESH_TOKEN={tokens['refresh_token']}")
    print("=" * 50)

    return tokens["refresh_token"]


def activity_to_completion(
    activity: StravaActivity,
    training_start: date,
    existing: Optional[WorkoutCompletion] = None,
) -> Optional[WorkoutCompletion]:
    """
    Convert a Strava run into a completion for its plan slot.

    Effort, weather and notes the user already entered for the slot are
    kept. Returns None for activities outside the training calendar.
    """
    slot = slot_for_date(training_start, activity.date)
    if slot is None:
        return None

    week, day = slot
    completion = WorkoutCompletion(
        week=week,
        day=day,
        status=CompletionStatus.COMPLETE,
        distance=f"{activity.distance_miles:.2f}",
        duration=format_duration(activity.moving_time_seconds),
        pace=activity.pace_per_mile,
        elevation=f"{activity.elevation_gain_feet:.0f} ft",
        heart_rate=(
            str(int(round(activity.average_heartrate)))
            if activity.average_heartrate
            else None
        ),
        notes=activity.name,
        date=activity.date.isoformat(),
        completed_at=activity.start_time.isoformat(),
    )

    if existing is not None:
        completion.id = existing.id
        completion.effort = existing.effort
        completion.weather = existing.weather
        completion.notes = existing.notes or completion.notes

    return completion


def sync_activities(
    client: StravaClient, store: CompletionStore, training_start: date
) -> int:
    """
    Pull runs since training_start into the completion store.

    When several runs fall on the same day the longest one is used.

    Returns:
        Number of plan slots written.
    """
    longest: Dict[Tuple[int, DayName], StravaActivity] = {}

    for activity in client.fetch_activities_since(training_start):
        if activity.activity_type != ActivityType.RUN:
            continue

        slot = slot_for_date(training_start, activity.date)
        if slot is None:
            continue

        current = longest.get(slot)
        if current is None or activity.distance_miles > current.distance_miles:
            longest[slot] = activity

    synced = 0
    for (week, day), activity in sorted(longest.items(), key=lambda item: (item[0][0], item[1].date)):
        completion = activity_to_completion(
            activity, training_start, existing=store.get_completion(week, day)
        )
        if completion is not None:
            store.upsert(completion)
            synced += 1

    logger.info(f"Synced {synced} runs from Strava")
    return synced
