import os
import faulthandler
import logging
import sys
import traceback
from PyQt6.QtWidgets import QApplication
from ui.main_window import MainWindow

_FAULT_LOG_HANDLE = None
_APP_DIR = os.path.dirname(os.path.abspath(__file__))


def _configure_logging() -> None:
    level_name = os.environ.get('KLINEGRAPH_LOG_LEVEL', 'INFO').upper()
    handlers = [logging.StreamHandler(sys.stderr)]
    try:
        handlers.append(logging.FileHandler(os.path.join(_APP_DIR, 'klinegraph.log'), encoding='utf-8'))
    except OSError:
        pass
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format='%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s',
        handlers=handlers,
    )


def _install_exception_logging() -> None:
    log = logging.getLogger('klinegraph.unhandled')

    def _hook(exc_type, exc_value, exc_tb):
        log.critical('Unhandled exception:\n%s', ''.join(traceback.format_exception(exc_type, exc_value, exc_tb)))

    sys.excepthook = _hook
    import threading

    def _thread_hook(args):
        _hook(args.exc_type, args.exc_value, args.exc_traceback)

    threading.excepthook = _thread_hook


def main():
    try:
        log_path = os.path.join(_APP_DIR, 'faulthandler.log')
        # Keep the handle alive for the process lifetime; faulthandler may write later.
        global _FAULT_LOG_HANDLE
        # Overwrite each run so logs reflect the current crash, not stale history.
        _FAULT_LOG_HANDLE = open(log_path, 'w', encoding='utf-8')
        _FAULT_LOG_HANDLE.write(f'pid={os.getpid()}\n')
        _FAULT_LOG_HANDLE.flush()
        faulthandler.enable(_FAULT_LOG_HANDLE, all_threads=True)
    except OSError:
        faulthandler.enable(all_threads=True)
    _configure_logging()
    _install_exception_logging()
    app = QApplication(sys.argv)
    app.setApplicationName('KlineGraph')
    window = MainWindow()
    window.show()
    return app.exec()


if __name__ == '__main__':
    sys.exit(main())
