import threading
import time

import webview

from python_medref import config
from python_medref.launcher import main as launcher_main


def main():
    # Backend runs in a daemon thread so closing the window ends the process
    backend_thread = threading.Thread(target=launcher_main, daemon=True)
    backend_thread.start()
    time.sleep(2)
    webview.create_window('Medication Reference', f'http://{config.get_host()}:{config.get_port()}')
    webview.start()


if __name__ == '__main__':
    main()
