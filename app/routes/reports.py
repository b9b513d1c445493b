from flask import Blueprint, request, jsonify
from app.middleware import tenant_required, get_current_scope
from app.services import reports
from app.services.query import ListParams

reports_bp = Blueprint('reports', __name__)


@reports_bp.route('/dashboard', methods=['GET'])
@tenant_required
def dashboard():
    """
    Load and invoice summaries
    GET /api/v1/reports/dashboard?date_from=2024-01-01&date_to=2024-01-31
    """
    params = ListParams.from_args(request.args)
    return jsonify(reports.dashboard(get_current_scope(), params.date_from, params.date_to)), 200
