from rupay.main import create_app
from rupay.services.investment_service import complete_matured_investments

# -------------------------------------------------------------------
# Flips approved investments past their maturity date to completed.
# Meant for cron; safe to run repeatedly.
# -------------------------------------------------------------------


def sweep():
    print("🚀 Starting maturity sweep")
    completed = complete_matured_investments()
    print(f"✅ Sweep finished, {completed} investment(s) completed.")
    return completed


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        sweep()
