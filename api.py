import csv
import io
import logging
from datetime import date
from decimal import Decimal

from flask import Blueprint, Response, current_app, jsonify, request

from access_control import (
    ForbiddenError,
    Resource,
    Role,
    can_modify_transaction,
    can_view_transaction,
    is_admin,
    require_access,
)
from api_docs import openapi_document
from auth import with_auth
from extensions import db
from financial_calculations import (
    calculate_financial_stats,
    filter_transactions_by_period,
    group_by_concept,
    group_by_day,
    period_start,
)
from form_validation import ValidationResult, parse_date, validate_transaction_form
from models import Transaction, User

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)

NOT_AN_OBJECT = ValidationResult(is_valid=False, errors=["Request body must be a JSON object"])


def _validation_error(result):
    return jsonify({"error": "Validation failed", "errors": result.errors}), 400


def _int_arg(name, default):
    try:
        return max(int(request.args.get(name, default)), 1)
    except (TypeError, ValueError):
        return default


def visible_transactions(user):
    """Base query restricted to the rows the user may read."""
    query = Transaction.query
    if not is_admin(user):
        query = query.filter_by(user_id=user.id)
    return query


# ---------------- Transactions ----------------

@api_bp.route("/transactions", methods=["GET"])
@with_auth()
def list_transactions(user):
    require_access(user, Resource.TRANSACTIONS_READ)

    page = _int_arg("page", 1)
    limit = _int_arg("limit", 10)
    tx_type = request.args.get("type")
    search = request.args.get("search")

    query = visible_transactions(user)
    if tx_type in ("INCOME", "EXPENSE"):
        query = query.filter_by(type=tx_type)
    if search:
        query = query.filter(Transaction.concept.ilike(f"%{search}%"))

    pagination = query.order_by(Transaction.date.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )
    return jsonify({
        "transactions": [t.to_dict(include_user=True) for t in pagination.items],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": pagination.total,
            "pages": pagination.pages,
        },
    })


@api_bp.route("/transactions", methods=["POST"])
@with_auth()
def create_transaction(user):
    require_access(user, Resource.TRANSACTIONS_WRITE)

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _validation_error(NOT_AN_OBJECT)

    result = validate_transaction_form(data)
    if not result.is_valid:
        return _validation_error(result)

    transaction = Transaction(
        concept=data["concept"].strip(),
        amount=Decimal(str(data["amount"]).strip()),
        type=data["type"],
        date=parse_date(data["date"]),
        user_id=user.id,
    )
    db.session.add(transaction)
    db.session.commit()
    logger.info("Transaction %s created by %s", transaction.id, user.id)
    return jsonify(transaction.to_dict(include_user=True)), 201


@api_bp.route("/transactions/<transaction_id>", methods=["GET"])
@with_auth()
def get_transaction(user, transaction_id):
    transaction = db.get_or_404(Transaction, transaction_id)
    if not can_view_transaction(user, transaction.user_id):
        raise ForbiddenError()
    return jsonify(transaction.to_dict(include_user=True))


@api_bp.route("/transactions/<transaction_id>", methods=["PUT"])
@with_auth()
def update_transaction(user, transaction_id):
    transaction = db.get_or_404(Transaction, transaction_id)
    if not can_modify_transaction(user, transaction.user_id):
        return jsonify({"error": "Only administrators can edit transactions"}), 403

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _validation_error(NOT_AN_OBJECT)

    stored = {
        "concept": transaction.concept,
        "amount": float(transaction.amount),
        "date": transaction.date.isoformat(),
        "type": transaction.type,
    }
    merged = {key: data[key] if key in data else value for key, value in stored.items()}
    result = validate_transaction_form(merged)
    if not result.is_valid:
        return _validation_error(result)

    transaction.concept = merged["concept"].strip()
    transaction.amount = Decimal(str(merged["amount"]).strip())
    transaction.date = parse_date(merged["date"])
    transaction.type = merged["type"]
    db.session.commit()
    logger.info("Transaction %s updated by %s", transaction.id, user.id)
    return jsonify(transaction.to_dict(include_user=True))


@api_bp.route("/transactions/<transaction_id>", methods=["DELETE"])
@with_auth()
def delete_transaction(user, transaction_id):
    transaction = db.get_or_404(Transaction, transaction_id)
    if not can_modify_transaction(user, transaction.user_id):
        return jsonify({"error": "Only administrators can delete transactions"}), 403

    db.session.delete(transaction)
    db.session.commit()
    logger.info("Transaction %s deleted by %s", transaction_id, user.id)
    return jsonify({"message": "Transaction deleted"})


# ---------------- Admin ----------------

@api_bp.route("/admin/users", methods=["GET"])
@with_auth(required_role=Role.ADMIN)
def list_users(user):
    users = User.query.order_by(User.created_at.desc()).all()
    return jsonify([u.to_dict() for u in users])


@api_bp.route("/admin/users", methods=["PATCH"])
@with_auth(required_role=Role.ADMIN)
def update_user_role(user):
    require_access(user, Resource.USERS_WRITE)

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    user_id = data.get("userId")
    role = data.get("role")
    if not user_id or not isinstance(user_id, str) or not role:
        return jsonify({"error": "userId and role are required"}), 400
    if role not in (Role.USER.value, Role.ADMIN.value):
        return jsonify({"error": "Invalid role"}), 400

    target = db.session.get(User, user_id)
    if target is None:
        return jsonify({"error": "User not found"}), 404

    target.role = role
    db.session.commit()
    logger.info("User %s set role of %s to %s", user.id, target.id, role)
    return jsonify({"id": target.id, "email": target.email, "name": target.name, "role": target.role})


def build_report(period, start=None, end=None, today=None):
    """
    Report over every user's transactions.

    An explicit start/end pair wins over `period`; a bad pair raises ValueError.
    """
    today = today or date.today()
    if not (start and end):
        start, end = period_start(period, today), today

    records = [
        t.to_dict(include_user=True)
        for t in Transaction.query.order_by(Transaction.date.desc()).all()
    ]
    records = filter_transactions_by_period(records, start, end)
    stats = calculate_financial_stats(records)

    return {
        "summary": {
            "totalIncome": stats["total_income"],
            "totalExpense": stats["total_expenses"],
            "balance": stats["balance"],
            "transactionCount": stats["transaction_count"],
            "period": period,
            "startDate": parse_date(start).isoformat(),
            "endDate": parse_date(end).isoformat(),
        },
        "chartData": group_by_day(records),
        "categoryStats": group_by_concept(records),
        "transactions": records[:10],
        "records": records,
    }


def report_csv(records):
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(["Date", "Concept", "Amount", "Type", "User"])
    for r in records:
        owner = r.get("user") or {}
        writer.writerow([
            r["date"],
            r["concept"],
            r["amount"],
            "Income" if r["type"] == "INCOME" else "Expense",
            owner.get("name") or owner.get("email") or "",
        ])
    return out.getvalue()


@api_bp.route("/admin/reports", methods=["GET"])
@with_auth(required_role=Role.ADMIN)
def reports(user):
    require_access(user, Resource.REPORTS_READ)

    period = request.args.get("period", "month")
    try:
        report = build_report(period, request.args.get("start"), request.args.get("end"))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    records = report.pop("records")
    if request.args.get("format") == "csv":
        filename = f"report-{period}-{date.today().isoformat()}.csv"
        return Response(
            report_csv(records),
            mimetype="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    return jsonify(report)


# ---------------- Profile ----------------

@api_bp.route("/user/profile", methods=["GET"])
@with_auth()
def profile(user):
    record = db.get_or_404(User, user.id)
    return jsonify(record.to_dict())


# ---------------- Docs ----------------

@api_bp.route("/docs", methods=["GET"])
def docs():
    return jsonify(openapi_document(
        current_app.config["APP_BASE_URL"],
        cookie_name=current_app.config["AUTH_COOKIE_NAME"],
    ))
