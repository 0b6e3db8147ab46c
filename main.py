import argparse
import logging
import sys

from PyQt5.QtWidgets import QApplication

from pdfdesk.ui import MainWindow
from pdfdesk.utils import LOG_LEVELS, configure_logging, load_config

logger = logging.getLogger("pdfdesk")


def main():
    """
    Main function to run the PDFDesk application.
    An optional PDF path on the command line is opened at startup.
    """
    parser = argparse.ArgumentParser(description="PDFDesk - view, annotate and process PDFs")
    parser.add_argument('file', nargs='?', help='PDF file to open')
    parser.add_argument(
        '--log-level',
        choices=LOG_LEVELS,
        default=None,
        help='Set logging level (default: from config, else INFO)'
    )
    args, qt_args = parser.parse_known_args()

    try:
        config = load_config()
    except ValueError as e:
        configure_logging('INFO')
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)
    configure_logging(args.log_level or config.log_level)

    app = QApplication([sys.argv[0]] + qt_args)

    window = MainWindow(config, args.file)
    window.showMaximized()
    sys.exit(app.exec_())


if __name__ == '__main__':
    main()
