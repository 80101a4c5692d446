import logging
from decimal import Decimal

from flask import Blueprint, current_app, flash, redirect, request, url_for

from access_control import can_modify_transaction, get_user_permissions, is_admin
from api import build_report, visible_transactions
from api_docs import endpoint_rows, openapi_document
from auth import clear_session_cookie, delete_session, get_session_token, page_view
from extensions import db
from financial_calculations import calculate_financial_stats
from form_validation import parse_date, validate_transaction_form, validate_user_form
from models import Transaction, User

logger = logging.getLogger(__name__)

views_bp = Blueprint("views", __name__)


@views_bp.route("/")
@page_view("index.html")
def home(user):
    return {}


@views_bp.route("/auth/signin")
@page_view("signin.html")
def signin(user):
    if user is not None:
        return redirect(url_for("views.dashboard"))
    return {}


@views_bp.route("/auth/signout")
def signout():
    delete_session(get_session_token())
    flash("You have been logged out.", "success")
    return clear_session_cookie(redirect(url_for("views.home")))


@views_bp.route("/unauthorized")
@page_view("unauthorized.html")
def unauthorized(user):
    return {}


@views_bp.route("/api-docs")
@page_view("api_docs.html")
def api_docs(user):
    document = openapi_document(current_app.config["APP_BASE_URL"], current_app.config["AUTH_COOKIE_NAME"])
    return {"info": document["info"], "tags": document["tags"], "endpoints": endpoint_rows(document)}


@views_bp.route("/dashboard")
@page_view("dashboard.html")
def dashboard(user):
    transactions = visible_transactions(user).order_by(Transaction.date.desc()).all()
    records = [t.to_dict() for t in transactions]
    return {
        "stats": calculate_financial_stats(records),
        "recent_transactions": records[:5],
    }


@views_bp.route("/transactions", methods=["GET", "POST"])
@page_view("transactions.html")
def transactions(user):
    errors = []
    form = {}

    if request.method == "POST":
        if not is_admin(user):
            return redirect(url_for("views.unauthorized"))

        form = {
            "concept": request.form.get("concept", ""),
            "amount": request.form.get("amount", "").strip(),
            "date": request.form.get("date", "").strip(),
            "type": request.form.get("type", ""),
        }
        result = validate_transaction_form(form)
        if result.is_valid:
            transaction = Transaction(
                concept=form["concept"].strip(),
                amount=Decimal(form["amount"]),
                type=form["type"],
                date=parse_date(form["date"]),
                user_id=user.id,
            )
            db.session.add(transaction)
            db.session.commit()
            logger.info("Transaction %s created by %s", transaction.id, user.id)
            flash("Transaction added successfully!", "success")
            return redirect(url_for("views.transactions"))
        errors = result.errors

    rows = visible_transactions(user).order_by(Transaction.date.desc()).all()
    return {
        "transactions": [t.to_dict(include_user=True) for t in rows],
        "can_write": is_admin(user),
        "errors": errors,
        "form": form,
    }


@views_bp.route("/transactions/<transaction_id>/delete", methods=["POST"])
@page_view()
def delete_transaction(user, transaction_id):
    transaction = db.get_or_404(Transaction, transaction_id)
    if not can_modify_transaction(user, transaction.user_id):
        return redirect(url_for("views.unauthorized"))

    db.session.delete(transaction)
    db.session.commit()
    logger.info("Transaction %s deleted by %s", transaction_id, user.id)
    flash("Transaction deleted successfully!", "success")
    return redirect(url_for("views.transactions"))


@views_bp.route("/profile")
@page_view("profile.html")
def profile(user):
    return {
        "profile": db.get_or_404(User, user.id),
        "permissions": get_user_permissions(user),
    }


@views_bp.route("/admin/users", methods=["GET", "POST"])
@page_view("admin_users.html")
def admin_users(user):
    errors = []

    if request.method == "POST":
        target = db.get_or_404(User, request.form.get("user_id", ""))
        form = {
            "name": request.form.get("name", ""),
            "email": target.email,
            "phone": request.form.get("phone", ""),
            "role": request.form.get("role", ""),
        }
        result = validate_user_form(form)
        if result.is_valid:
            target.name = form["name"].strip()
            target.phone = form["phone"].strip() or None
            target.role = form["role"]
            db.session.commit()
            logger.info("User %s updated %s (role %s)", user.id, target.id, target.role)
            flash(f"User {target.email} updated.", "success")
            return redirect(url_for("views.admin_users"))
        errors = result.errors

    return {
        "users": User.query.order_by(User.created_at.desc()).all(),
        "errors": errors,
    }


@views_bp.route("/admin/reports")
@page_view("admin_reports.html")
def admin_reports(user):
    period = request.args.get("period", "month")
    try:
        report = build_report(period, request.args.get("start"), request.args.get("end"))
    except ValueError as e:
        flash(str(e), "danger")
        report = build_report(period)
    report.pop("records")
    return {"report": report, "period": period}
