"""Command line interface for checking configuration loading"""
from . import settings_conf
from .lib.load_settings_conf import find_settings_file


def main():
    """Display loaded configuration"""
    print(f"\nSettings Configuration ({find_settings_file()}):")
    print("-" * 50)
    for key, value in settings_conf.items():
        print(f"{key}: {value}")


if __name__ == "__main__":
    main()
