"""Static plan catalog.

Plans are reference data, not persisted. An investment copies the plan's
title, profit rates and duration when it is submitted, so later catalog edits
never change existing records.
"""
from decimal import Decimal


class Plan:
    def __init__(self, id, title, min_investment, max_investment, daily_profit_min,
                 daily_profit_max, duration_days, icon="TrendingUp", badge=None, primary=False):
        self.id = id
        self.title = title
        self.min_investment = Decimal(str(min_investment))
        self.max_investment = Decimal(str(max_investment))
        self.daily_profit_min = Decimal(str(daily_profit_min))
        self.daily_profit_max = Decimal(str(daily_profit_max))
        self.duration_days = duration_days
        self.icon = icon
        self.badge = badge
        self.primary = primary

    def accepts(self, amount):
        return self.min_investment <= amount <= self.max_investment

    @property
    def total_return_min(self):
        """Total profit over the plan term, in percent."""
        return self.daily_profit_min * self.duration_days

    @property
    def total_return_max(self):
        return self.daily_profit_max * self.duration_days

    def __repr__(self):
        return f"<Plan {self.id} {self.min_investment}-{self.max_investment} {self.duration_days}d>"


PLANS = [
    Plan("basic", "Basic Plan", 500, 500, "1.0", "1.5", 15, icon="TrendingUp"),
    Plan("advance", "Advance Plan", 500, 50_000, "1.5", "2.0", 25, icon="Zap",
         badge="Popular", primary=True),
    Plan("premium", "Premium Plan", 1_000, 100_000, "2.0", "2.5", 50, icon="Gem"),
    Plan("expert", "Expert Plan", 50_000, 500_000, "2.5", "3.0", 75, icon="Crown"),
    Plan("master", "Master Plan", 1_000, 100_000, "3.0", "4.5", 90, icon="Milestone"),
]

_PLANS_BY_ID = {p.id: p for p in PLANS}


def get_plan(plan_id):
    return _PLANS_BY_ID.get(plan_id)
