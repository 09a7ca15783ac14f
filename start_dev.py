#!/usr/bin/env python3
"""
Finance Forecasting Engine - Development Server Launcher

Quick start script that:
1. Sets up the environment and database
2. Optionally loads demo data
3. Starts the Flask development server

Usage:
    python start_dev.py              # Start with default settings
    python start_dev.py --demo       # Load demo data first
    python start_dev.py --port 8080  # Use custom port
"""

import os
import sys
import argparse
from pathlib import Path


# Colors for terminal output
class Colors:
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    BOLD = '\033[1m'
    END = '\033[0m'


def print_banner():
    """Print startup banner"""
    print(f"\n{Colors.GREEN}{'=' * 60}{Colors.END}")
    print(f"  {Colors.BOLD}Finance Forecasting Engine{Colors.END}")
    print(f"  {Colors.CYAN}Forecasts and cash flow predictions from transaction history{Colors.END}")
    print(f"{Colors.GREEN}{'=' * 60}{Colors.END}\n")


def print_step(step_num, message, status="running"):
    """Print step with status"""
    if status == "running":
        icon = f"{Colors.YELLOW}...{Colors.END}"
    elif status == "done":
        icon = f"{Colors.GREEN}ok{Colors.END}"
    elif status == "skip":
        icon = f"{Colors.BLUE}->{Colors.END}"
    else:
        icon = f"{Colors.RED}!!{Colors.END}"

    print(f"  {icon} Step {step_num}: {message}")


def setup_environment():
    """Set up environment variables"""
    os.environ.setdefault('FLASK_DEBUG', 'True')
    os.environ.setdefault('FLASK_ENV', 'development')

    # Database
    db_path = Path(__file__).parent / 'instance' / 'finance_forecasting.db'
    db_path.parent.mkdir(exist_ok=True)
    os.environ.setdefault('DATABASE_URL', f'sqlite:///{db_path}')


def load_demo_data(count=1):
    """Load demo users into database"""
    sys.path.insert(0, str(Path(__file__).parent))

    from web.app import create_app
    from src.database.models import db, Transaction
    from src.demo_data import load_demo_data_to_db

    app = create_app()

    with app.app_context():
        # Check if data already exists
        existing = Transaction.query.count()
        if existing > 0:
            print(f"    {Colors.CYAN}Database has {existing} transactions. Skipping demo data.{Colors.END}")
            return []

        user_ids = load_demo_data_to_db(db.session, count=count)
        for user_id in user_ids:
            print(f"    {Colors.GREEN}Demo user: {user_id}{Colors.END}")
        return user_ids


def run_server(port=5101, host='127.0.0.1'):
    """Run the Flask development server"""
    sys.path.insert(0, str(Path(__file__).parent))

    from web.app import create_app

    app = create_app()

    print(f"\n{Colors.GREEN}{'=' * 60}{Colors.END}")
    print(f"{Colors.BOLD}  Server running at: {Colors.CYAN}http://{host}:{port}{Colors.END}")
    print(f"  Try: http://{host}:{port}/api/users/<user_id>/forecast")
    print(f"{Colors.GREEN}{'=' * 60}{Colors.END}\n")

    app.run(debug=True, port=port, host=host, use_reloader=True)


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description='Finance Forecasting Engine Development Server'
    )
    parser.add_argument(
        '--demo',
        action='store_true',
        help='Load demo data on startup'
    )
    parser.add_argument(
        '--demo-count',
        type=int,
        default=1,
        help='Number of demo users to create (default: 1)'
    )
    parser.add_argument(
        '--port',
        type=int,
        default=5101,
        help='Port to run server on (default: 5101)'
    )
    parser.add_argument(
        '--host',
        default='127.0.0.1',
        help='Host to bind to (default: 127.0.0.1)'
    )

    args = parser.parse_args()

    print_banner()

    # Step 1: Set up environment
    print_step(1, "Setting up environment...", "running")
    setup_environment()
    print_step(1, "Environment configured", "done")

    # Step 2: Load demo data if requested
    if args.demo:
        print_step(2, f"Loading {args.demo_count} demo user(s)...", "running")
        try:
            user_ids = load_demo_data(count=args.demo_count)
            print_step(2, f"Demo data ready ({len(user_ids)} new users)", "done")
        except Exception as e:
            print_step(2, f"Demo data failed: {e}", "error")
            print(f"    {Colors.YELLOW}Continuing without demo data...{Colors.END}")
    else:
        print_step(2, "Demo data loading skipped (use --demo to load)", "skip")

    # Step 3: Start server
    print_step(3, "Starting development server...", "running")

    try:
        run_server(port=args.port, host=args.host)
    except KeyboardInterrupt:
        print(f"\n{Colors.YELLOW}Server stopped.{Colors.END}")


if __name__ == '__main__':
    main()
