import json
import sys

from services.config.log import configure_logging
from .core import resolve


def main():
    if len(sys.argv) < 2:
        print("Usage: python -m services.resolver.cli <company name or ticker>")
        sys.exit(2)
    configure_logging()
    name = " ".join(sys.argv[1:])
    result = resolve(name)
    print(json.dumps(result.to_dict(), indent=2))
    if result.status == "not_found":
        sys.exit(1)


if __name__ == "__main__":
    main()
