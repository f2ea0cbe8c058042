import csv
import io
from datetime import datetime

from flask import Blueprint, request, jsonify, send_file

from pixelgym.domain.achievements.services import student_report
from pixelgym.domain.users.services import is_student, is_super_admin
from pixelgym.errors import Forbidden
from pixelgym.utils.decorators import require_account
from pixelgym.utils.records import load_logs, load_overrides, load_users

admin_bp = Blueprint("admin", __name__)


@admin_bp.route("/reports", methods=["GET"])
@require_account()
def reports(current_user):
    """Per-student report cards; ``?format=csv`` downloads them as a spreadsheet."""
    if not is_super_admin(current_user):
        raise Forbidden("Only the administrator can export reports")

    logs = load_logs()
    overrides = load_overrides()
    cards = [student_report(u, logs, overrides) for u in load_users() if is_student(u)]

    if request.args.get("format") != "csv":
        return jsonify(cards), 200

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["Student ID", "Student", "Total Workouts", "Max Weight", "Badges", "Last Active"])
    for card in cards:
        writer.writerow([
            card["studentId"],
            card["name"],
            card["totalWorkouts"],
            card["maxWeight"],
            ", ".join(b["title"] for b in card["badges"]),
            card["lastActive"] or "Never",
        ])
    output.seek(0)

    return send_file(
        io.BytesIO(output.getvalue().encode("utf-8-sig")),
        mimetype="text/csv",
        as_attachment=True,
        download_name=f"student_reports_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
    )
