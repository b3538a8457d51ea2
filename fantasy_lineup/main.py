"""
Main application entry point for the Fantasy Lineup Engine.
Orchestrates data gathering, score resolution and lineup optimization.
"""

import logging
import logging.handlers
import schedule
import time
from typing import Optional, List
import sys
import argparse

from .config.settings import BotConfig, ConfigManager
from .api.yahoo_client import YahooFantasyClient, YahooAPIError
from .analysis.score_resolver import ScoreResolver
from .analysis.lineup_optimizer import LineupOptimizer
from .data.models import OptimizationResult, Player


class LineupBot:
    """Fetches a team's week, scores every player and picks the starters."""

    def __init__(self, config: BotConfig, client: Optional[YahooFantasyClient] = None):
        self.config = config
        self.client = client or YahooFantasyClient(config)
        self.optimizer = LineupOptimizer()
        self.logger = logging.getLogger(__name__)

    def setup_logging(self):
        """Setup logging configuration."""
        log_config = self.config.logging

        logger = logging.getLogger()
        logger.setLevel(getattr(logging, log_config.level))

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        # File handler with rotation
        file_handler = logging.handlers.RotatingFileHandler(
            log_config.file,
            maxBytes=log_config.max_size_mb * 1024 * 1024,
            backupCount=log_config.backup_count
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    def run_weekly_optimization(self, week: Optional[int] = None,
                                projected: Optional[bool] = None) -> Optional[OptimizationResult]:
        """Run the complete lineup optimization for one week."""
        projected = self.config.projected if projected is None else projected
        mode = "projected" if projected else "actual"

        try:
            # Step 1: League slots and scoring rules
            settings = self.client.fetch_league_settings(self.config.league_key)
            week = self._resolve_week(week, settings.current_week)
            self.logger.info(f"Starting lineup optimization for week {week} ({mode} points)")

            slots = settings.starting_slots()
            resolver = ScoreResolver(settings.scoring_settings)

            # Step 2: Roster with best-effort points
            records = self.client.fetch_weekly_roster(self.config.team_key, week, projected)
            players = resolver.score_players(records)

            # Step 3: Fill in players the roster response left without points
            players = resolver.enrich(
                players,
                lambda keys: self.client.fetch_batch_stats(keys, week, projected)
            )

            # Step 4: Assign starters
            result = self.optimizer.optimize_lineup(slots, players)
            self._log_lineup_summary(result)
            return result

        except (YahooAPIError, ValueError) as e:
            self.logger.error(f"Error running lineup optimization: {e}")
            return None

    def _resolve_week(self, week: Optional[int], current_week: Optional[int]) -> int:
        """Explicit week, then configured week, then the league's current week."""
        if week is not None:
            return week
        if self.config.week is not None:
            return self.config.week
        return current_week or 1

    def _log_lineup_summary(self, result: OptimizationResult):
        """Log the starters, bench and total."""
        self.logger.info("Optimized lineup summary:")
        for starter in result.starters:
            self.logger.info(f"  {starter.slot.label}: {self._describe(starter.player)}")
        if result.bench:
            self.logger.info("Bench:")
            for player in result.bench:
                self.logger.info(f"  {player.primary_position}: {self._describe(player)}")
        self.logger.info(f"Total: {result.total:.2f} points")

    def _describe(self, player: Optional[Player]) -> str:
        if player is None:
            return '(empty)'
        return f"{player.name} ({player.points:.2f}, {player.points_source})"

    def run_scheduled_tasks(self):
        """Run the optimization every day at the configured time."""
        schedule.every().day.at(self.config.run_daily_at).do(self.run_weekly_optimization)

        self.logger.info(f"Scheduled lineup optimization daily at {self.config.run_daily_at}")

        while True:
            schedule.run_pending()
            time.sleep(60)  # Check every minute

    def run_once(self, week: Optional[int] = None, projected: Optional[bool] = None) -> bool:
        """Run the optimization once for immediate execution."""
        return self.run_weekly_optimization(week, projected) is not None


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Fantasy Football Lineup Optimizer")
    parser.add_argument("--config", default="config.yaml", help="Path to the YAML configuration file")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument("--week", type=int, help="Specific week to optimize")
    parser.add_argument("--projected", action="store_true", help="Use projected instead of actual points")
    parser.add_argument("--schedule", action="store_true", help="Run the optimization on a daily schedule")

    args = parser.parse_args(argv)

    try:
        config = ConfigManager(args.config).load_config()
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    bot = LineupBot(config)
    bot.setup_logging()

    try:
        if args.schedule and not args.once:
            bot.run_scheduled_tasks()
        else:
            success = bot.run_once(args.week, True if args.projected else None)
            sys.exit(0 if success else 1)

    except KeyboardInterrupt:
        print("\nStopped by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
