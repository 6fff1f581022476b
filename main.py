"""Main entry point for Spellwatch."""

import sys

from loguru import logger

from spellwatch.utils.config import settings
from spellwatch.utils.logger import setup_logging

USAGE = "Usage: python main.py [api|seed|start-spell CITY|stop-spell CITY|report CITY [text|json]]"


def _services():
    from spellwatch.core import build_services
    from spellwatch.store import create_store
    return build_services(create_store(settings))


def main():
    """Run the application."""
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    setup_logging(settings)
    cmd = sys.argv[1]
    city = sys.argv[2] if len(sys.argv) > 2 else None

    if cmd in ("start-spell", "stop-spell", "report") and not city:
        print(USAGE)
        sys.exit(1)

    from spellwatch.utils.errors import SpellwatchError

    try:
        if cmd == "api":
            import uvicorn
            logger.info("Starting API server...")
            uvicorn.run(
                "spellwatch.api.main:app",
                host=settings.api.host,
                port=settings.api.port,
                reload=settings.api.reload,
            )

        elif cmd == "seed":
            from spellwatch.store.seed import seed_database
            svc = _services()
            result = seed_database(svc.store)
            print(f"Seeded: {result}")
            svc.store.close()

        elif cmd == "start-spell":
            svc = _services()
            spell = svc.spells.start_spell(city)
            print(f"Spell {spell.spell_id} started for {city}")
            svc.store.close()

        elif cmd == "stop-spell":
            svc = _services()
            spell = svc.spells.stop_spell(city)
            print(f"Spell {spell.spell_id} stopped for {city}: {len(spell.spell_data)} point(s) archived")
            svc.store.close()

        elif cmd == "report":
            from spellwatch.core import format_report
            svc = _services()
            output = sys.argv[3] if len(sys.argv) > 3 else "text"
            print(format_report(svc.reports.latest(city), output))
            svc.store.close()

        else:
            print(f"Unknown command: {cmd}")
            sys.exit(1)

    except SpellwatchError as e:
        logger.error(e.message)
        print(f"Error: {e.message}")
        sys.exit(2)


if __name__ == "__main__":
    main()
