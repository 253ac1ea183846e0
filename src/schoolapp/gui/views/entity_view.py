"""Generic CRUD screen: record list on top, single add/edit form below.

Widgets are generated from the entity's ``FieldSpec`` list; all behaviour
lives in ``CrudViewModel``. The view re-renders from ``CrudState`` whenever
the view model notifies.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QCheckBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from schoolapp.domain.entities import FieldKind
from schoolapp.gui.viewmodels.crud_viewmodel import CrudState, CrudViewModel

__all__ = ["EntityView"]

ConfirmFn = Callable[[str], bool]


def _ask(parent: QWidget) -> ConfirmFn:
    def confirm(text: str) -> bool:  # pragma: no cover - modal dialog
        answer = QMessageBox.question(parent, "Confirm", text)
        return answer == QMessageBox.StandardButton.Yes

    return confirm


class EntityView(QWidget):
    def __init__(
        self,
        viewmodel: CrudViewModel,
        parent: Optional[QWidget] = None,
        *,
        confirm: ConfirmFn | None = None,
        on_back: Callable[[], None] | None = None,
    ):
        super().__init__(parent)
        self.viewmodel = viewmodel
        self._confirm = confirm or _ask(self)
        self._on_back = on_back
        self._inputs: Dict[str, QWidget] = {}
        self._build_ui()
        viewmodel.add_listener(self._render)
        self._render(viewmodel.state)

    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        definition = self.viewmodel.definition
        root = QVBoxLayout(self)
        header = QHBoxLayout()
        if self._on_back is not None:
            back = QPushButton("← Back")
            back.clicked.connect(self._on_back)  # type: ignore
            header.addWidget(back)
        title = QLabel(definition.label)
        title.setObjectName("viewTitleLabel")
        header.addWidget(title, 1)
        self.refresh_button = QPushButton("Refresh")
        self.refresh_button.clicked.connect(self.viewmodel.load)  # type: ignore
        header.addWidget(self.refresh_button)
        root.addLayout(header)

        self.list_widget = QListWidget()
        self.list_widget.itemDoubleClicked.connect(self._edit_item)  # type: ignore
        root.addWidget(self.list_widget, 1)
        self.status_label = QLabel("")
        root.addWidget(self.status_label)

        row = QHBoxLayout()
        self.edit_button = QPushButton("Edit")
        self.edit_button.clicked.connect(lambda *_: self._edit_item(self.list_widget.currentItem()))  # type: ignore
        self.delete_button = QPushButton("Delete")
        self.delete_button.clicked.connect(self._delete_current)  # type: ignore
        row.addStretch(1)
        row.addWidget(self.edit_button)
        row.addWidget(self.delete_button)
        root.addLayout(row)

        self.form_box = QGroupBox()
        form = QFormLayout(self.form_box)
        for spec in definition.fields:
            if spec.kind is FieldKind.FLAG:
                box = QCheckBox()
                box.toggled.connect(lambda checked, n=spec.name: self.viewmodel.set_field(n, checked))  # type: ignore
                widget: QWidget = box
            else:
                edit = QLineEdit()
                if spec.kind is FieldKind.DATE8:
                    edit.setPlaceholderText("YYYYMMDD")
                    edit.setMaxLength(8)
                edit.textChanged.connect(lambda text, n=spec.name: self.viewmodel.set_field(n, text))  # type: ignore
                widget = edit
            label = spec.label + (" *" if spec.required else "")
            form.addRow(label, widget)
            self._inputs[spec.name] = widget
        buttons = QHBoxLayout()
        self.cancel_button = QPushButton("Cancel")
        self.cancel_button.clicked.connect(self.viewmodel.reset_form)  # type: ignore
        self.save_button = QPushButton("Save")
        self.save_button.clicked.connect(self.save)  # type: ignore
        buttons.addStretch(1)
        buttons.addWidget(self.cancel_button)
        buttons.addWidget(self.save_button)
        form.addRow(buttons)
        root.addWidget(self.form_box)

    # ------------------------------------------------------------------
    def _render(self, state: CrudState) -> None:
        vm = self.viewmodel
        self.list_widget.clear()
        for record in state.items:
            if not isinstance(record, Mapping):
                continue
            text = vm.title_of(record)
            if vm.definition.status_field:
                text += "   [Active]" if vm.is_active(record) else "   [Inactive]"
            item = QListWidgetItem(text)
            item.setData(Qt.ItemDataRole.UserRole, record.get("id"))
            self.list_widget.addItem(item)
        if state.loading:
            self.status_label.setText("Loading…")
        elif state.error and not state.items:
            self.status_label.setText(state.error)
        elif state.loaded_once and not state.items:
            self.status_label.setText(f"No {vm.definition.label.lower()} records yet.")
        else:
            self.status_label.setText("")
        label = vm.definition.label
        self.form_box.setTitle(f"Edit {label}" if state.editing else f"Add {label}")
        self.cancel_button.setVisible(state.editing)
        self.save_button.setEnabled(not state.submitting)
        self._sync_inputs(state.form)

    def _sync_inputs(self, form: Mapping[str, Any]) -> None:
        # widgets already showing the form value are left untouched
        for name, widget in self._inputs.items():
            value = form.get(name)
            widget.blockSignals(True)
            try:
                if isinstance(widget, QCheckBox):
                    if widget.isChecked() != bool(value):
                        widget.setChecked(bool(value))
                elif isinstance(widget, QLineEdit):
                    text = "" if value is None else str(value)
                    if widget.text() != text:
                        widget.setText(text)
            finally:
                widget.blockSignals(False)

    def _record_for(self, item: Optional[QListWidgetItem]) -> Optional[Mapping[str, Any]]:
        if item is None:
            return None
        record_id = item.data(Qt.ItemDataRole.UserRole)
        for record in self.viewmodel.state.items:
            if isinstance(record, Mapping) and record.get("id") == record_id:
                return record
        return None

    # Actions -----------------------------------------------------------
    def save(self) -> bool:
        return self.viewmodel.submit()

    def _edit_item(self, item: Optional[QListWidgetItem]) -> None:
        record = self._record_for(item)
        if record is not None:
            self.viewmodel.begin_edit(record)

    def _delete_current(self) -> None:
        record = self._record_for(self.list_widget.currentItem())
        if record is None:
            return
        name = self.viewmodel.title_of(record)
        if self._confirm(f"Delete {self.viewmodel.definition.label.lower()} '{name}'?"):
            self.viewmodel.delete(record)

    def closeEvent(self, event):  # type: ignore[override]
        self.viewmodel.unmount()
        super().closeEvent(event)
