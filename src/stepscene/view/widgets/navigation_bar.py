"""
Previous / Next bar with a step counter.
"""
from PySide6.QtWidgets import QWidget, QHBoxLayout, QPushButton, QLabel
from PySide6.QtCore import Qt

from stepscene.controller.session import EditorSession


class NavigationBar(QWidget):
    def __init__(self, session: EditorSession, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.session = session
        self.store = session.store

        layout = QHBoxLayout(self)
        layout.setContentsMargins(8, 4, 8, 4)

        self.btn_previous = QPushButton("← Previous")
        self.btn_previous.setToolTip("Previous step")
        self.btn_previous.clicked.connect(self.session.previous_step)

        self.lbl_counter = QLabel("0 / 0")
        self.lbl_counter.setAlignment(Qt.AlignCenter)
        self.lbl_counter.setMinimumWidth(80)

        self.btn_next = QPushButton("Next →")
        self.btn_next.setToolTip("Next step")
        self.btn_next.clicked.connect(self.session.next_step)

        layout.addStretch()
        layout.addWidget(self.btn_previous)
        layout.addWidget(self.lbl_counter)
        layout.addWidget(self.btn_next)
        layout.addStretch()

        self.store.graph_changed.connect(self.update_from_state)
        self.store.selection_changed.connect(lambda *_: self.update_from_state())
        self.update_from_state()

    def update_from_state(self) -> None:
        navigator = self.store.navigator
        selected = self.store.selected_id
        position, total = navigator.counter(selected)

        # Hidden when there is nothing to walk through
        self.setVisible(total > 0)
        self.lbl_counter.setText(f"{position} / {total}")
        self.btn_previous.setEnabled(navigator.can_go_previous(selected))
        self.btn_next.setEnabled(navigator.can_go_next(selected))
