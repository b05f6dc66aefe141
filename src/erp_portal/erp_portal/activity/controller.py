from __future__ import annotations

from flask import Flask, request

from ..common.http import api_route, json_body, ok, paged
from ..common.pagination import parse_page_request
from ..container import Container


def register(app: Flask, container: Container) -> None:
    activity = container.activity_service

    @app.route("/api/activity-logs/track-activity", methods=["POST"], endpoint="activity_track")
    @api_route
    def activity_track():
        result = activity.track(
            json_body(),
            ip_address=request.headers.get("X-Forwarded-For", request.remote_addr),
            user_agent=request.headers.get("User-Agent"),
        )
        return ok(201, message="Activity logged", **result)

    @app.route("/api/activity-logs", methods=["GET"], endpoint="activity_list")
    @api_route
    def activity_list():
        page = parse_page_request(
            request.args,
            default_limit=app.config["DEFAULT_PAGE_SIZE"],
            max_limit=app.config["MAX_PAGE_SIZE"],
        )
        return paged(activity.list(request.args, page))

    @app.route("/api/user-status/heartbeat", methods=["POST"], endpoint="user_status_heartbeat")
    @api_route
    def user_status_heartbeat():
        return ok(**activity.heartbeat(json_body()))

    @app.route("/api/user-status/end", methods=["POST"], endpoint="user_status_end")
    @api_route
    def user_status_end():
        # navigator.sendBeacon posts text/plain; json_body handles both
        return ok(**activity.end_session(json_body()))

    @app.route("/api/active-users", methods=["GET"], endpoint="active_users")
    @api_route
    def active_users():
        users = activity.active_users()
        return ok(data=users, total=len(users))
