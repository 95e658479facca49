"""The HTTP application: routing, middleware, database setup and serving."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, abort, request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from thirdrail.admin import AdminController, RiderController
from thirdrail.clients import ConfigurationError, MartaClient, TwitterClient
from thirdrail.importer import RailRunner
from thirdrail.live import LiveController
from thirdrail.marta import get_marta_client
from thirdrail.models import db_migrate
from thirdrail.options import Options
from thirdrail.responses import ApiError
from thirdrail.seed import SeedError, seed
from thirdrail.smart import MartaMirror, SmartController
from thirdrail.static import StaticController
from thirdrail.twitter import get_twitter_client

logger = logging.getLogger(__name__)

PORT = 5000

_CORS_METHODS = frozenset({"GET", "HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"})
_CORS_HEADERS = frozenset(
    {"accept", "accept-language", "content-language", "origin", "content-type", "x-requested-with"}
)
_STATION_ID = re.compile(r"[0-9]+")


def strip_trailing_slash(path: str) -> str:
    """Drop one trailing slash from any path other than the root."""
    if path != "/" and path.endswith("/"):
        return path[:-1]
    return path


def _suffix_middleware(wsgi_app: Callable) -> Callable:
    def wrapped(environ: dict, start_response: Callable):
        environ["PATH_INFO"] = strip_trailing_slash(environ.get("PATH_INFO", ""))
        return wsgi_app(environ, start_response)

    return wrapped


def _cors_preflight() -> Response | None:
    if request.method != "OPTIONS" or "Origin" not in request.headers:
        return None
    wanted = request.headers.get("Access-Control-Request-Method")
    if wanted is None:
        return None
    if wanted.upper() not in _CORS_METHODS:
        return Response(status=HTTPStatus.METHOD_NOT_ALLOWED)
    requested = [
        name.strip()
        for name in request.headers.get("Access-Control-Request-Headers", "").split(",")
        if name.strip()
    ]
    if any(name.lower() not in _CORS_HEADERS for name in requested):
        return Response(status=HTTPStatus.FORBIDDEN)
    response = Response(status=HTTPStatus.OK)
    response.headers["Access-Control-Allow-Methods"] = wanted.upper()
    if requested:
        response.headers["Access-Control-Allow-Headers"] = ", ".join(requested)
    return response


def _cors_headers(response: Response) -> Response:
    if "Origin" in request.headers:
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Credentials"] = "true"
    return response


def _new_router() -> Flask:
    router = Flask("thirdrail")
    router.wsgi_app = _suffix_middleware(router.wsgi_app)  # type: ignore[method-assign]
    router.before_request(_cors_preflight)
    router.after_request(_cors_headers)
    return router


def _json_response(body: Any, status: int = HTTPStatus.OK) -> Response:
    return Response(json.dumps(body) + "\n", status=int(status), mimetype="application/json")


def _handle(call: Callable[[], Any]) -> Response:
    try:
        body = call()
    except ApiError as err:
        if err.body is None:
            return Response("", status=err.status, mimetype="application/json")
        return _json_response(err.body, err.status)
    return _json_response(body)


def _database_url(connection_string: str) -> str:
    url = connection_string.strip()
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url


@dataclass
class App:
    """The service: its options, database, upstream clients and router."""

    options: Options = field(default_factory=Options)
    engine: Engine | None = None
    marta_client: MartaClient | None = None
    twitter_client: TwitterClient | None = None
    sd_client: MartaMirror | None = None
    router: Flask = field(default_factory=_new_router, init=False)
    _sessions: sessionmaker | None = field(default=None, init=False, repr=False)
    _rail_runner: RailRunner | None = field(default=None, init=False, repr=False)

    @property
    def session_factory(self) -> sessionmaker:
        if self._sessions is None:
            if self.engine is None:
                raise RuntimeError("the database is not initialised")
            self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._sessions

    def _with_session(self, handler: Callable[[Session], Any]) -> Response:
        def call() -> Any:
            with self.session_factory() as session:
                return handler(session)

        return _handle(call)

    def initialize(self) -> None:
        """Connect to the configured database unless an engine was given."""
        if self.engine is not None:
            return
        try:
            engine = create_engine(_database_url(self.options.db_connection_string))
            with engine.connect():
                pass
        except (SQLAlchemyError, ImportError, ValueError) as err:
            raise RuntimeError(f"Could not connect database: {err}") from err
        self.engine = engine

    def initialize_schema(self, quiet: bool = False) -> None:
        """Create the tables and seed the rail network."""
        logging.getLogger("thirdrail").setLevel(logging.ERROR if quiet else logging.INFO)
        sessions = self.session_factory
        try:
            db_migrate(self.engine)
        except SQLAlchemyError as err:
            raise RuntimeError(f"failed migrating database: {err}") from err
        try:
            with sessions() as session:
                seed(session)
        except (SeedError, SQLAlchemyError) as err:
            raise RuntimeError(f"failed seeding database: {err}") from err
        logger.info("Success!")

    def start(self, custom_router: Callable[[], Any] | None = None) -> None:
        """Mount the routes and serve, or only run ``custom_router`` when given."""
        if custom_router is not None:
            custom_router()
            return

        if self.marta_client is None:
            self.marta_client = get_marta_client(
                self.options.marta_api_key, self.options.marta_cache_ttl
            )
        if self.twitter_client is None:
            self.twitter_client = get_twitter_client(
                self.options.twitter_client_id,
                self.options.twitter_client_secret,
                self.options.twitter_cache_ttl,
            )

        self.router = _new_router()
        self.mount_live_routes()
        self.mount_static_routes()
        self.mount_smart_routes()
        self.mount_rider_routes()
        self.mount_admin_routes()

        if self.options.rail_runner:
            self._rail_runner = RailRunner(
                marta_client=self.marta_client, session_factory=self.session_factory
            )
            self._rail_runner.start()

        self.serve()

    def mount_live_routes(self) -> None:
        if self.marta_client is None:
            raise ConfigurationError("No MARTA client present - unable to mount Live routes.")
        controller = LiveController(marta_client=self.marta_client)
        add = self.router.add_url_rule
        add(
            "/live/schedule/line/<line>",
            "live_schedule_by_line",
            lambda line: _handle(lambda: controller.get_schedule_by_line(line)),
            methods=["GET"],
        )
        add(
            "/live/schedule/station/<station>",
            "live_schedule_by_station",
            lambda station: _handle(lambda: controller.get_schedule_by_station(station)),
            methods=["GET"],
        )
        add(
            "/live/alerts",
            "live_alerts",
            lambda: _handle(controller.get_alerts),
            methods=["GET"],
        )

    def mount_static_routes(self) -> None:
        controller = StaticController()
        add = self.router.add_url_rule
        add(
            "/static/schedule/station",
            "static_schedule_by_station",
            lambda: _handle(
                lambda: controller.get_static_schedule_by_station(
                    request.args.get("schedule"), request.args.get("station_name")
                )
            ),
            methods=["GET"],
        )
        add(
            "/static/lines",
            "static_lines",
            lambda: self._with_session(controller.get_lines),
            methods=["GET"],
        )
        add(
            "/static/directions",
            "static_directions",
            lambda: self._with_session(controller.get_directions),
            methods=["GET"],
        )
        add(
            "/static/stations",
            "static_stations",
            lambda: self._with_session(controller.get_stations),
            methods=["GET"],
        )
        add(
            "/static/stations/location",
            "static_stations_location",
            lambda: self._with_session(
                lambda session: controller.get_locations(
                    session, request.args.get("latitude"), request.args.get("longitude")
                )
            ),
            methods=["GET"],
        )

    def mount_smart_routes(self) -> None:
        if self.twitter_client is None:
            raise ConfigurationError("No Twitter client present - unable to mount Smart routes.")
        controller = SmartController(
            marta_client=self.marta_client,
            twitter_client=self.twitter_client,
            sd_client=self.sd_client,
        )

        def station_details(station_id: str) -> Response:
            if not _STATION_ID.fullmatch(station_id):
                abort(HTTPStatus.NOT_FOUND)
            return self._with_session(
                lambda session: controller.get_station_details(session, station_id)
            )

        add = self.router.add_url_rule
        add(
            "/smart/parking",
            "smart_parking",
            lambda: _handle(controller.get_parking_status),
            methods=["GET"],
        )
        add("/smart/station/<station_id>", "smart_station", station_details, methods=["GET"])
        add(
            "/smart/emergencies",
            "smart_emergencies",
            lambda: _handle(controller.get_emergency_status),
            methods=["GET"],
        )

    def mount_rider_routes(self) -> None:
        controller = RiderController()
        self.router.add_url_rule(
            "/rider/alerts",
            "rider_alerts",
            lambda: self._with_session(controller.get_rider_alerts),
            methods=["GET"],
        )

    def mount_admin_routes(self) -> None:
        controller = AdminController(
            marta_client=self.marta_client, admin_key=self.options.admin_api_key
        )
        self.router.add_url_rule(
            "/admin/event/ingest",
            "admin_ingest_event",
            lambda: _handle(
                lambda: controller.ingest_event(
                    request.headers.get("key", ""), request.get_data(as_text=True)
                )
            ),
            methods=["POST"],
        )

    def serve(self) -> None:
        """Serve the router on port 5000 until interrupted."""
        print(f"started on port :{PORT}")
        self.router.run(host="0.0.0.0", port=PORT)