import logging

from flask import Flask, Response, jsonify, request, url_for
from werkzeug.exceptions import HTTPException

from .constants import FEED_CONTENT_TYPE
from .context import AppContext
from .exceptions import CalendarError, TokenInvalidError, ValidationError
from .flask_adapters import (
    calendar_filename,
    error_response,
    get_owner_id,
    parse_iso_param,
    read_ical_upload,
    read_json_body,
    to_flask_response,
)

logger = logging.getLogger(__name__)


def create_app(context: AppContext | None = None):
    app = Flask(__name__)
    ctx = context or AppContext()
    app.extensions["icalsync"] = ctx

    def owner() -> str:
        return get_owner_id(request, ctx.config.auth_header)

    @app.errorhandler(TokenInvalidError)
    def invalid_token(error):
        # Unknown, revoked, and expired tokens look the same to the caller
        return jsonify({"error": "Invalid or expired token"}), 404

    @app.errorhandler(CalendarError)
    def calendar_error(error):
        return error_response(error)

    @app.errorhandler(Exception)
    def unexpected_error(error):
        if isinstance(error, HTTPException):
            return error
        logger.exception("Unhandled error serving request")
        return jsonify({"error": "Internal server error"}), 500

    @app.route("/api/ical/import", methods=["POST"])
    def import_ical():
        owner_id = owner()
        result = ctx.importer.import_ics(owner_id, read_ical_upload(request))
        return jsonify({"success": True, **result.model_dump()})

    @app.route("/api/ical/export", methods=["GET"])
    def export_ical():
        owner_id = owner()
        start = parse_iso_param(request.args.get("start"), "start")
        end = parse_iso_param(request.args.get("end"), "end")
        ical_content = ctx.exporter.export(owner_id, start, end)
        filename = calendar_filename(ctx.config.calendar_name)
        return Response(
            ical_content,
            content_type=FEED_CONTENT_TYPE,
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/feed/<token>", methods=["GET"])
    def public_feed(token):
        """Serve a user's calendar to a subscribing client (no auth)."""
        feed = ctx.publisher.serve(
            token,
            if_none_match=request.headers.get("If-None-Match"),
            if_modified_since=request.headers.get("If-Modified-Since"),
        )
        return to_flask_response(feed)

    @app.route("/api/subscriptions", methods=["GET"])
    def list_subscriptions():
        subs = ctx.subscription_manager.list(owner())
        return jsonify([sub.model_dump(mode="json") for sub in subs])

    @app.route("/api/subscriptions", methods=["POST"])
    def create_subscription():
        owner_id = owner()
        data = read_json_body(request)
        if not data.get("remote_url"):
            raise ValidationError("remote_url is required")
        sub = ctx.subscription_manager.create(
            owner_id,
            data["remote_url"],
            display_name=data.get("display_name"),
            color=data.get("color"),
            auto_sync_enabled=bool(data.get("auto_sync_enabled", True)),
            sync_interval_minutes=data.get("sync_interval_minutes"),
        )
        return jsonify(sub.model_dump(mode="json")), 201

    @app.route("/api/subscriptions/<subscription_id>", methods=["PATCH"])
    def update_subscription(subscription_id):
        owner_id = owner()
        sub = ctx.subscription_manager.update(
            owner_id, subscription_id, **read_json_body(request)
        )
        return jsonify(sub.model_dump(mode="json"))

    @app.route("/api/subscriptions/<subscription_id>", methods=["DELETE"])
    def delete_subscription(subscription_id):
        removed = ctx.subscription_manager.delete(owner(), subscription_id)
        return jsonify({"success": True, "deleted_events": removed})

    @app.route("/api/subscriptions/<subscription_id>/sync", methods=["POST"])
    def sync_subscription(subscription_id):
        owner_id = owner()
        ctx.subscription_manager.get(owner_id, subscription_id)
        force = bool(read_json_body(request).get("force", False))
        result = ctx.engine.sync_by_id(subscription_id, force=force)
        return jsonify(result.model_dump(mode="json"))

    @app.route("/api/feeds", methods=["GET"])
    def list_feeds():
        tokens = ctx.token_manager.list(owner())
        return jsonify([token.to_public_dict() for token in tokens])

    @app.route("/api/feeds", methods=["POST"])
    def create_feed():
        owner_id = owner()
        data = read_json_body(request)
        record = ctx.token_manager.create(
            owner_id,
            str(data.get("name") or ""),
            include_private=bool(data.get("include_private", False)),
            expires_in_days=data.get("expires_in_days"),
        )
        body = record.model_dump(mode="json")
        body["feed_url"] = url_for("public_feed", token=record.token, _external=True)
        return jsonify(body), 201

    @app.route("/api/feeds/<token_id>/revoke", methods=["POST"])
    def revoke_feed(token_id):
        record = ctx.token_manager.revoke(owner(), token_id)
        return jsonify(record.to_public_dict())

    @app.route("/api/feeds/<token_id>", methods=["DELETE"])
    def delete_feed(token_id):
        ctx.token_manager.delete(owner(), token_id)
        return jsonify({"success": True})

    return app
