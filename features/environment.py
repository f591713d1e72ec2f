"""
Behave environment configuration for DNS SQL Backend integration tests.
"""

import logging
import shutil
import tempfile
from pathlib import Path

from dns_sql_backend.drivers.registry import init_registry

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def before_all(context):
    """Set up test environment before all tests."""
    context.base_dir = Path(__file__).parent.parent
    context.driver_config = {"driver": "sqlite"}
    logger.info("Test environment setup complete")


def before_scenario(context, scenario):
    """Give each scenario its own database and registry."""
    context.scenario_name = scenario.name
    context.work_dir = Path(tempfile.mkdtemp(prefix="dns_sql_backend_"))
    context.db_path = str(context.work_dir / "zones.db")
    context.registry = init_registry(context.driver_config)
    context.binding = None
    context.records = None
    context.error = None

    logger.info(f"Starting scenario: {scenario.name}")


def after_scenario(context, scenario):
    """Destroy bindings and remove the scenario database."""
    try:
        context.registry.clear()
    except Exception as e:
        logger.warning(f"Failed to clear registry: {e}")

    shutil.rmtree(context.work_dir, ignore_errors=True)
    logger.info(f"Completed scenario: {scenario.name}")
