"""
Main Application Window
=======================
The primary GUI container that holds the Menu Bar, the control tabs, the 3D
scene, the step editor and the navigation bar.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects global actions (like File -> Save) to the session.
"""
import logging

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QSplitter, QTabBar, QStackedWidget, QMessageBox
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QKeySequence

from stepscene.controller.session import EditorSession
from stepscene.model.errors import PersistenceError, ValidationError
from stepscene.view.widgets.scene_3d import Scene3DWidget
from stepscene.view.widgets.navigation_bar import NavigationBar

# Import Control Panels
from stepscene.view.tabs.tab_steps import StepsControlPanel
from stepscene.view.tabs.tab_connections import ConnectionsControlPanel
from stepscene.view.tabs.tab_model import ModelControlPanel
from stepscene.view.tabs.tab_editor import StepEditorPanel

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "StepScene"
STATUS_TIMEOUT_MS = 3000


class MainWindow(QMainWindow):
    def __init__(self, session: EditorSession) -> None:
        super().__init__()
        self.session = session
        self.store = session.store

        self.update_window_title()
        self.resize(1400, 900)

        # --- MAIN CONTAINER ---
        main_widget = QWidget()
        self.setCentralWidget(main_widget)

        # Vertical Layout: Tabs on Top, Splitter, Navigation Below
        main_layout = QVBoxLayout(main_widget)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        # --- 1. TOP TAB BAR ---
        self.tab_bar = QTabBar()
        self.tab_bar.setDrawBase(True)
        self.tab_bar.setShape(QTabBar.RoundedNorth)
        self.tab_bar.setExpanding(True)

        self.tab_bar.addTab("1. Steps")
        self.tab_bar.addTab("2. Connections")
        self.tab_bar.addTab("3. Model")

        self.tab_bar.setStyleSheet("""
                    QTabBar::tab { height: 35px; min-width: 100px; }
                    QTabBar::tab:selected { font-weight: bold; }
                """)

        main_layout.addWidget(self.tab_bar)

        # --- 2. SPLITTER (CONTENT AREA) ---
        splitter = QSplitter(Qt.Horizontal)
        main_layout.addWidget(splitter, stretch=1)

        # --- LEFT SIDE: Control Panels (Stacked) ---
        self.controls_stack = QStackedWidget()

        self.steps_panel = StepsControlPanel(self.session)
        self.connections_panel = ConnectionsControlPanel(self.session)
        self.model_panel = ModelControlPanel(self.session)

        # Order must match Tab Bar order
        self.controls_stack.addWidget(self.steps_panel)  # Index 0
        self.controls_stack.addWidget(self.connections_panel)  # Index 1
        self.controls_stack.addWidget(self.model_panel)  # Index 2

        splitter.addWidget(self.controls_stack)

        # --- CENTER: Shared 3D Visualization ---
        self.visualizer = Scene3DWidget(self.session)
        splitter.addWidget(self.visualizer)

        # --- RIGHT SIDE: Step Editor ---
        self.editor_panel = StepEditorPanel(self.session)
        splitter.addWidget(self.editor_panel)

        splitter.setSizes([320, 780, 300])

        # --- 3. BOTTOM NAVIGATION ---
        self.navigation_bar = NavigationBar(self.session)
        main_layout.addWidget(self.navigation_bar)

        # --- SIGNAL CONNECTIONS ---
        self.tab_bar.currentChanged.connect(self.controls_stack.setCurrentIndex)
        self.store.graph_changed.connect(self.update_window_title)
        self.store.viewer_mode_changed.connect(self.on_viewer_mode_changed)

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()
        self.on_viewer_mode_changed(self.store.viewer_mode)

    def _create_actions(self) -> None:
        self.act_new = QAction("New Model", self)
        self.act_new.setShortcut(QKeySequence.New)
        self.act_new.triggered.connect(self.model_panel.on_new_clicked)

        self.act_save = QAction("Save", self)
        self.act_save.setShortcut(QKeySequence.Save)
        self.act_save.triggered.connect(self.on_file_save)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

        self.act_viewer = QAction("Viewer Mode", self)
        self.act_viewer.setCheckable(True)
        self.act_viewer.setShortcut("Ctrl+M")
        self.act_viewer.toggled.connect(self.session.set_viewer_mode)

        self.act_next = QAction("Next Step", self)
        self.act_next.setShortcut(Qt.Key_Right)
        self.act_next.triggered.connect(self.session.next_step)

        self.act_previous = QAction("Previous Step", self)
        self.act_previous.setShortcut(Qt.Key_Left)
        self.act_previous.triggered.connect(self.session.previous_step)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        file_menu.addAction(self.act_new)
        file_menu.addSeparator()
        file_menu.addAction(self.act_save)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

        view_menu = menu_bar.addMenu("&View")
        view_menu.addAction(self.act_viewer)
        view_menu.addSeparator()
        view_menu.addAction(self.act_previous)
        view_menu.addAction(self.act_next)

    # --- HELPER METHODS ---
    def update_window_title(self) -> None:
        """Updates the window title based on the model title and mode."""
        state = self.store.state
        title = f"{VISIBLE_APP_NAME} - [{state.title.strip() or 'Untitled'}]"
        if state.viewer_mode:
            title += " (Viewer)"
        self.setWindowTitle(title)

    def on_viewer_mode_changed(self, enabled: bool) -> None:
        self.act_viewer.blockSignals(True)
        self.act_viewer.setChecked(enabled)
        self.act_viewer.blockSignals(False)
        self.act_new.setEnabled(not enabled)
        self.act_save.setEnabled(not enabled)
        self.update_window_title()
        self.statusBar().showMessage("Viewer mode" if enabled else "Creator mode", STATUS_TIMEOUT_MS)

    # --- FILE SLOTS ---

    def on_file_save(self) -> None:
        try:
            model_id = self.session.save_model()
        except ValidationError as e:
            QMessageBox.warning(self, "Cannot Save", str(e))
            return
        except PersistenceError as e:
            QMessageBox.critical(self, "Error", f"Could not save the model:\n{e}")
            return
        if model_id:
            self.model_panel.refresh_saved_models()
            self.statusBar().showMessage("Model saved successfully!", STATUS_TIMEOUT_MS)

    def closeEvent(self, event, /) -> None:
        """Stop the render loop and close the PyVista plotter safely."""
        self.visualizer.shutdown()
        event.accept()
