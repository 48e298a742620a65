"""
Main entrypoint for the IPR Sinop Connect backend.

Usage:
    Resolve a CEP from the command line (`python main.py 78550-000`), or serve the
    API with uvicorn (`uvicorn src.api.app:app`).
"""
import logging
import sys

from src.db.database import create_tables
from src.geocoding.resolver import AddressResolver

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)


def main(argv=None):
    """
    Resolve the CEP given on the command line and print the outcome.
    """
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print("Usage: python main.py <CEP>")
        return 2

    try:
        # Initialize database tables
        create_tables()

        result = AddressResolver().resolve(args[0])
        for notice in result.notices:
            suffix = f" ({notice.description})" if notice.description else ""
            print(f"  [{notice.variant}] {notice.title}{suffix}")

        if result.address is None:
            return 1

        address = result.address
        print(f"\nAddress: {address.street}, {address.neighborhood}, {address.city}/{address.state}")
        if result.found:
            print(f"Coordinates: {result.coordinates.latitude}, {result.coordinates.longitude} (via {result.provider})")
        else:
            print("Coordinates: not found, pick the location on the map")
        return 0
    except Exception as e:
        print(f"An error occurred in the main function: {str(e)}")
        return 1


if __name__ == "__main__":
    exit_code = main()
    print(f"Exiting with code {exit_code}")
    sys.exit(exit_code)
