import logging
import unicodedata
from urllib.parse import quote

from flask import Blueprint, Response, current_app, jsonify, request

from angebot.domain.formatting import offer_filename
from angebot.domain.importer import parse_render_request
from angebot.errors import CommitNotSupported, ValidationError
from angebot.services.catalog import load_templates_file, search_templates
from angebot.web.document import OfferDocument

logger = logging.getLogger("angebot.web")

bp = Blueprint("angebot_api", __name__, url_prefix="/api/angebot")


@bp.route("/generate-offer", methods=["POST"])
def generate_offer():
    """Rendert die Vorschau eines Angebots als PDF. Speichern (commit) gibt es hier nicht."""
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Request-Body ist kein gueltiges JSON.")
    config = current_app.config["ANGEBOT"]
    draft, commit = parse_render_request(data, default_tax_rate=config.default_tax_rate)
    if commit:
        raise CommitNotSupported()

    pdf = OfferDocument(config.company_name).render(draft)
    filename = offer_filename(draft.customer, draft.offer_number)
    logger.info(f"Angebot {draft.offer_number or '-'} gerendert ({len(pdf)} Bytes)")

    resp = Response(pdf, mimetype="application/pdf")
    ascii_name = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    resp.headers["Content-Disposition"] = (
        f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
    )
    resp.headers["X-Offer-Id"] = ""
    resp.headers["X-Offer-Number"] = draft.offer_number or ""
    return resp


@bp.route("/templates", methods=["GET"])
def templates():
    config = current_app.config["ANGEBOT"]
    items = load_templates_file(config.templates_file) if config.templates_file else []
    items = search_templates(items, request.args.get("q"))
    return jsonify([tpl.model_dump() for tpl in items])
