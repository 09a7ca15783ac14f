"""
Finance Forecasting Engine - Flask Web Application

JSON API over the forecasting engine: multi-month financial forecasts
and short-horizon cash flow predictions for a user's transactions.
"""

import os
import sys
import logging
from datetime import date, datetime, timedelta
from flask import Flask, request, jsonify
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.settings import get_config
from src.database.models import db
from src.database.provider import SqlTransactionProvider
from src.forecasting.cash_flow_forecaster import CashFlowForecaster
from src.forecasting.exceptions import InsufficientDataError, ValidationError
from src.forecasting.financial_forecaster import FinancialForecaster
from src.forecasting.models import ForecastQuery, TransactionType

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# Query Parsing
# =============================================================================

def _parse_date(value, field_name):
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO date (YYYY-MM-DD)")


def _parse_list(value):
    if not value:
        return None
    items = [item.strip() for item in value.split(',') if item.strip()]
    return items or None


def _parse_bool(value, default=True):
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def parse_forecast_query(user_id, args, default_horizon_days):
    """
    Build a ForecastQuery from request arguments.

    Missing dates default to today through today + default_horizon_days.
    Malformed values raise ValidationError.
    """
    start_value = args.get('start_date')
    start_date = _parse_date(start_value, 'start_date') if start_value else date.today()

    end_value = args.get('end_date')
    if end_value:
        end_date = _parse_date(end_value, 'end_date')
    else:
        end_date = start_date + timedelta(days=default_horizon_days)

    transaction_types = None
    type_values = _parse_list(args.get('transaction_types'))
    if type_values:
        try:
            transaction_types = [TransactionType(value) for value in type_values]
        except ValueError:
            raise ValidationError(
                "transaction_types must be a comma-separated list of "
                + ", ".join(t.value for t in TransactionType)
            )

    threshold_value = args.get('confidence_threshold')
    confidence_threshold = 0.7
    if threshold_value is not None:
        try:
            confidence_threshold = float(threshold_value)
        except ValueError:
            raise ValidationError("confidence_threshold must be a number between 0 and 1")

    return ForecastQuery(
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        categories=_parse_list(args.get('categories')),
        transaction_types=transaction_types,
        accounts=_parse_list(args.get('accounts')),
        include_recurring=_parse_bool(args.get('include_recurring')),
        confidence_threshold=confidence_threshold,
        algorithm=args.get('algorithm')
    )


# =============================================================================
# App Factory
# =============================================================================

def create_app(config_class=None):
    """Create Flask application"""
    app = Flask(__name__)

    # Load configuration
    if config_class is None:
        config_class = get_config()
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)

    # Rate limiting
    limiter = Limiter(
        key_func=get_remote_address,
        app=app,
        default_limits=[app.config.get('RATELIMIT_DEFAULT', '100 per minute')]
    )

    # Create tables
    with app.app_context():
        db.create_all()
        logger.info("Database tables created")

    # =============================================================================
    # API Routes - Health
    # =============================================================================

    @app.route('/api/health', methods=['GET'])
    @limiter.exempt
    def api_health():
        """Liveness check"""
        return jsonify({
            'status': 'ok',
            'app_name': app.config['APP_NAME']
        })

    # =============================================================================
    # API Routes - Forecasting
    # =============================================================================

    @app.route('/api/users/<user_id>/forecast', methods=['GET'])
    def api_financial_forecast(user_id):
        """Generate a multi-month financial forecast"""
        query = parse_forecast_query(
            user_id, request.args, app.config['FORECAST_DEFAULT_HORIZON_DAYS']
        )

        forecaster = FinancialForecaster(
            SqlTransactionProvider(),
            lookback_days=app.config['FORECAST_LOOKBACK_DAYS'],
            min_history_days=app.config['MIN_HISTORY_DAYS']
        )
        result = forecaster.generate_financial_forecast(query)

        return jsonify({
            'success': True,
            'data': result.to_dict()
        })

    @app.route('/api/users/<user_id>/cashflow', methods=['GET'])
    def api_cash_flow_prediction(user_id):
        """Generate a short-horizon cash flow prediction"""
        query = parse_forecast_query(
            user_id, request.args, app.config['CASH_FLOW_DEFAULT_HORIZON_DAYS']
        )

        forecaster = CashFlowForecaster(
            SqlTransactionProvider(),
            lookback_days=app.config['CASH_FLOW_LOOKBACK_DAYS'],
            min_history_days=app.config['MIN_HISTORY_DAYS']
        )
        result = forecaster.generate_cash_flow_prediction(query)

        return jsonify({
            'success': True,
            'data': result.to_dict()
        })

    # =============================================================================
    # Error Handlers
    # =============================================================================

    @app.errorhandler(ValidationError)
    def validation_error(e):
        return jsonify({'success': False, 'error': str(e)}), 400

    @app.errorhandler(InsufficientDataError)
    def insufficient_data(e):
        return jsonify({
            'success': False,
            'error': e.message,
            'distinct_days': e.distinct_days
        }), 422

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'success': False, 'error': 'Not found'}), 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f"Server error: {e}")
        return jsonify({'success': False, 'error': 'Internal server error'}), 500

    return app


# =============================================================================
# Main
# =============================================================================

if __name__ == '__main__':
    app = create_app()
    port = int(os.environ.get('PORT', 5000))
    debug = os.environ.get('FLASK_DEBUG', 'True').lower() == 'true'
    app.run(debug=debug, port=port, host='0.0.0.0')
