# backend/app.py
import structlog
from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from backend.balances import balance_series, debts_for_participant, net_balances, participant_balance
from backend.config import get_settings
from backend.exceptions import InvalidTransactionError, StoreLoadError
from backend.logging_config import configure_logging
from backend.records import transaction_from_record, transactions_from_settings
from backend.settlement import simplify_debts
from backend.store import TransactionStore

logger = structlog.get_logger(__name__)


def create_app(settings=None, store=None):
    settings = settings if settings is not None else get_settings()
    store = store if store is not None else TransactionStore()

    app = Flask(__name__)
    CORS(app, origins=settings.CORS_ORIGINS)  # Lets the React frontend talk to this backend

    def stored_transactions():
        return transactions_from_settings(store.fetch(), settings)

    # --- Errors come back as {"error": ...} ---
    @app.errorhandler(InvalidTransactionError)
    def invalid_transaction(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(StoreLoadError)
    def store_unavailable(e):
        return jsonify({"error": str(e)}), 503

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def unexpected_error(e):
        logger.exception("request_failed", path=request.path)
        return jsonify({"error": str(e)}), 500

    # --- 1. HEALTH CHECK ROUTE ---
    @app.route('/api', methods=['GET'])
    def health_check():
        return jsonify({"status": "healthy", "message": f"{settings.PROJECT_NAME} backend is running!"})

    # --- 2. CALCULATION ROUTE ---
    # Stateless: simplifies whatever transactions are posted
    @app.route('/api/calculate', methods=['POST'])
    def calculate():
        data = request.get_json(silent=True)
        if data is None:
            raise InvalidTransactionError("request body must be a JSON list of transactions")

        transactions = transactions_from_settings(data, settings)
        debts = simplify_debts(transactions)
        return jsonify([d.to_dict() for d in debts])

    # --- 3. STORED TRANSACTIONS ---
    @app.route('/api/transactions', methods=['GET'])
    def list_transactions():
        return jsonify(store.fetch())

    @app.route('/api/transactions', methods=['POST'])
    def add_transaction():
        record = request.get_json(silent=True)
        transaction = transaction_from_record(
            record,
            known_participants=settings.KNOWN_PARTICIPANTS,
            default_participants=settings.DEFAULT_PARTICIPANTS,
            missing_policy=settings.MISSING_PARTICIPANTS_POLICY,
        )
        stored = {
            "paid_by": transaction.payer,
            "amount": transaction.amount,
            "participants": transaction.participants,
            "date": transaction.date,
        }
        store.add(stored)
        return jsonify(stored), 201

    # --- 4. DEBTS FOR THE STORED TRANSACTIONS ---
    @app.route('/api/debts', methods=['GET'])
    def list_debts():
        debts = simplify_debts(stored_transactions())
        participant = request.args.get('participant')
        if not participant:
            return jsonify({"debts": [d.to_dict() for d in debts]})

        return jsonify({
            "participant": participant,
            "debts": [d.to_dict() for d in debts_for_participant(debts, participant)],
            "balance": participant_balance(debts, participant),
        })

    @app.route('/api/balances', methods=['GET'])
    def list_balances():
        return jsonify(net_balances(stored_transactions()))

    @app.route('/api/balance-series', methods=['GET'])
    def series():
        participant = request.args.get('participant')
        if not participant:
            return jsonify({"error": "participant query parameter is required"}), 400
        return jsonify({
            "participant": participant,
            "series": balance_series(stored_transactions(), participant),
        })

    return app


def main():
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.JSON_LOGS)
    app = create_app(settings)
    app.run(debug=settings.DEBUG, port=settings.PORT)


if __name__ == '__main__':
    main()
