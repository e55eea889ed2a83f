"""
Application Initialization
==========================
This module constructs the MVC (Model-View-Controller) architecture and starts
the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Instantiates the Store (StepGraphStore) and the saved-models library.
2. Wraps both in the EditorSession that the widgets talk to.
3. Instantiates the Main Window (View) and passes the session into it.
4. Prevents circular import errors by being the orchestrator.
"""
import logging
import sys
from PySide6.QtWidgets import QApplication

from stepscene.config import get_library_path
from stepscene.logging_config import setup_logging
from stepscene.controller.session import EditorSession
from stepscene.controller.store import StepGraphStore
from stepscene.model.io import ModelLibrary
from stepscene.view.main_window import MainWindow


def main() -> None:
    # 1. Setup Logging (Console + Optional File)
    # Use logging.DEBUG to see everything during development
    setup_logging(level=logging.INFO)

    # 2. Create the Qt Application
    app = QApplication(sys.argv)
    app.setApplicationName("StepScene")

    # 3. Initialize the Store and the saved-models library
    store = StepGraphStore()
    library = ModelLibrary(get_library_path())
    session = EditorSession(store, library)

    # 4. Initialize the Main Window, passing the session
    window = MainWindow(session)
    window.show()

    # 5. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
