"""
GUI — головне вікно програми (CustomTkinter).
Ліворуч: форма кампанії та прогноз. Праворуч: KPI, фільтри, таблиця, лог.
"""

import json
import logging
import os
import customtkinter as ctk
from datetime import datetime
from tkinter import filedialog, messagebox, ttk

from adstats.constants import (
    APP_NAME, APP_VERSION, CHANNELS, STATUSES, FILTER_ALL,
    DATABASE_FILENAME, DEFAULT_DATABASE_FILE, SETTINGS_FILE,
)
from adstats.models import AdStatsError, ValidationError, parse_form, parse_real
from adstats.query import (
    aggregate, filter_campaigns, forecast, format_forecast, format_kpis,
    has_any_filter,
)
from adstats.storage import CampaignStore

logger = logging.getLogger(__name__)

ctk.set_appearance_mode("dark")
ctk.set_default_color_theme("blue")

# Пункт «нічого не обрано» у випадаючих списках форми
NOT_SELECTED = "—"

# (ключ, заголовок, ширина) колонок таблиці
TABLE_COLUMNS = [
    ("name", "Назва", 180),
    ("channel", "Канал", 90),
    ("status", "Статус", 90),
    ("budget", "Бюджет", 90),
    ("impressions", "Покази", 90),
    ("clicks", "Кліки", 70),
    ("conversions", "Конверсії", 80),
    ("revenue", "Дохід", 90),
    ("ctr", "CTR %", 70),
    ("cpc", "CPC", 70),
    ("cpa", "CPA", 70),
    ("roi", "ROI %", 80),
]

KPI_CARDS = [
    ("total_budget", "💰 Бюджет"),
    ("avg_roi", "📈 Середній ROI"),
    ("avg_ctr", "🎯 Середній CTR"),
    ("total_conversions", "✅ Конверсії"),
    ("active_count", "🟢 Активні"),
]


class App(ctk.CTk):
    """Головне вікно програми."""

    def __init__(self):
        super().__init__()

        # Розміри
        self.geometry("1280x820")
        self.minsize(1100, 700)
        self.after(0, lambda: self.title(f"{APP_NAME} v{APP_VERSION}"))

        # Дані
        self.settings = self._load_settings()
        self.store = CampaignStore(self._database_path())
        self.visible: list = []
        self.rows: dict = {}  # iid → Campaign

        # Побудова UI
        self._build_ui()

        self._reload_store()
        self._set_status("Програму запущено. Дані завантажено.")

    # ─────────────────────────────────────────
    #  SETTINGS (локальний файл)
    # ─────────────────────────────────────────

    def _load_settings(self) -> dict:
        try:
            with open(SETTINGS_FILE, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError):
            return {}

    def _save_settings(self, **kwargs):
        """Зберігає налаштування. Можна передати окремі поля."""
        self.settings.update(kwargs)
        try:
            with open(SETTINGS_FILE, "w", encoding="utf-8") as f:
                json.dump(self.settings, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.warning(f"⚠️ Не вдалося зберегти налаштування: {e}")

    def _database_path(self) -> str:
        return self.settings.get("database_file") or DEFAULT_DATABASE_FILE

    # ─────────────────────────────────────────
    #  BUILD UI
    # ─────────────────────────────────────────

    def _build_ui(self):
        self.grid_columnconfigure(1, weight=1)
        self.grid_rowconfigure(0, weight=1)

        self._build_sidebar()

        self.main_frame = ctk.CTkFrame(self, corner_radius=0, fg_color="transparent")
        self.main_frame.grid(row=0, column=1, sticky="nsew")
        self.main_frame.grid_columnconfigure(0, weight=1)
        self.main_frame.grid_rowconfigure(2, weight=1)

        self._build_kpi_row()
        self._build_filter_row()
        self._build_table()
        self._build_log()

    def _build_sidebar(self):
        self.sidebar = ctk.CTkScrollableFrame(self, width=300, corner_radius=0)
        self.sidebar.grid(row=0, column=0, sticky="nsw")

        ctk.CTkLabel(self.sidebar, text="📊 AdStats",
                     font=ctk.CTkFont(size=22, weight="bold")).pack(pady=(20, 2))
        ctk.CTkLabel(self.sidebar, text=f"v{APP_VERSION}",
                     font=ctk.CTkFont(size=12), text_color="gray").pack(pady=(0, 15))

        # ─── Форма кампанії ───
        ctk.CTkLabel(self.sidebar, text="Кампанія",
                     font=ctk.CTkFont(size=15, weight="bold")).pack(anchor="w", padx=15)

        self.entry_name = self._form_entry("Назва")
        self.opt_channel = self._form_option("Канал", CHANNELS)
        self.opt_status = self._form_option("Статус", STATUSES)
        self.entry_budget = self._form_entry("Бюджет")
        self.entry_impressions = self._form_entry("Покази")
        self.entry_clicks = self._form_entry("Кліки")
        self.entry_conversions = self._form_entry("Конверсії")
        self.entry_revenue = self._form_entry("Дохід")

        buttons = ctk.CTkFrame(self.sidebar, fg_color="transparent")
        buttons.pack(fill="x", padx=15, pady=(12, 5))
        buttons.grid_columnconfigure((0, 1), weight=1)

        ctk.CTkButton(buttons, text="➕ Додати", height=36,
                      fg_color="#28a745", hover_color="#218838",
                      command=self._add_campaign).grid(row=0, column=0, sticky="ew", padx=(0, 4), pady=3)
        ctk.CTkButton(buttons, text="✏️ Оновити", height=36,
                      command=self._update_campaign).grid(row=0, column=1, sticky="ew", padx=(4, 0), pady=3)
        ctk.CTkButton(buttons, text="🗑️ Видалити", height=36,
                      fg_color="#dc3545", hover_color="#c82333",
                      command=self._delete_campaign).grid(row=1, column=0, sticky="ew", padx=(0, 4), pady=3)
        ctk.CTkButton(buttons, text="🧹 Очистити", height=36,
                      fg_color="transparent", border_width=1,
                      command=self._clear_form_clicked).grid(row=1, column=1, sticky="ew", padx=(4, 0), pady=3)
        ctk.CTkButton(buttons, text="💾 Зберегти у файл", height=36,
                      fg_color="transparent", border_width=1,
                      command=self._save_clicked).grid(row=2, column=0, columnspan=2, sticky="ew", pady=3)

        # ─── Прогноз ───
        ctk.CTkLabel(self.sidebar, text="Прогноз бюджету",
                     font=ctk.CTkFont(size=15, weight="bold")).pack(anchor="w", padx=15, pady=(18, 3))

        forecast_row = ctk.CTkFrame(self.sidebar, fg_color="transparent")
        forecast_row.pack(fill="x", padx=15)
        forecast_row.grid_columnconfigure(0, weight=1)

        self.entry_growth = ctk.CTkEntry(forecast_row, placeholder_text="Зміна бюджету, %", height=34)
        self.entry_growth.grid(row=0, column=0, sticky="ew", padx=(0, 6))
        ctk.CTkButton(forecast_row, text="🔮", width=45, height=34,
                      command=self._forecast_clicked).grid(row=0, column=1)

        self.lbl_forecast = ctk.CTkLabel(self.sidebar, text="", justify="left",
                                         font=ctk.CTkFont(size=12), wraplength=260)
        self.lbl_forecast.pack(anchor="w", padx=15, pady=(6, 10))

        # ─── База ───
        ctk.CTkLabel(self.sidebar, text="База даних",
                     font=ctk.CTkFont(size=15, weight="bold")).pack(anchor="w", padx=15, pady=(10, 3))
        self.lbl_db_path = ctk.CTkLabel(self.sidebar, text="", justify="left",
                                        font=ctk.CTkFont(size=11), text_color="gray",
                                        wraplength=260)
        self.lbl_db_path.pack(anchor="w", padx=15)
        ctk.CTkButton(self.sidebar, text="📁 Обрати файл бази", height=32,
                      fg_color="transparent", border_width=1,
                      command=self._pick_database_file).pack(fill="x", padx=15, pady=(5, 15))

    def _form_entry(self, label: str) -> ctk.CTkEntry:
        ctk.CTkLabel(self.sidebar, text=label,
                     font=ctk.CTkFont(size=12)).pack(anchor="w", padx=15, pady=(6, 0))
        entry = ctk.CTkEntry(self.sidebar, height=32)
        entry.pack(fill="x", padx=15)
        return entry

    def _form_option(self, label: str, values) -> ctk.CTkOptionMenu:
        ctk.CTkLabel(self.sidebar, text=label,
                     font=ctk.CTkFont(size=12)).pack(anchor="w", padx=15, pady=(6, 0))
        option = ctk.CTkOptionMenu(self.sidebar, values=[NOT_SELECTED, *values], height=32)
        option.set(NOT_SELECTED)
        option.pack(fill="x", padx=15)
        return option

    def _build_kpi_row(self):
        row = ctk.CTkFrame(self.main_frame, fg_color="transparent")
        row.grid(row=0, column=0, sticky="ew", padx=20, pady=(20, 10))

        self.kpi_labels = {}
        for i, (key, title) in enumerate(KPI_CARDS):
            row.grid_columnconfigure(i, weight=1)
            card = ctk.CTkFrame(row)
            card.grid(row=0, column=i, sticky="ew", padx=4)

            ctk.CTkLabel(card, text=title, font=ctk.CTkFont(size=12),
                         text_color="gray").pack(padx=12, pady=(10, 0), anchor="w")
            value = ctk.CTkLabel(card, text="—", font=ctk.CTkFont(size=20, weight="bold"))
            value.pack(padx=12, pady=(0, 10), anchor="w")
            self.kpi_labels[key] = value

    def _build_filter_row(self):
        row = ctk.CTkFrame(self.main_frame)
        row.grid(row=1, column=0, sticky="ew", padx=20, pady=(0, 10))
        row.grid_columnconfigure(0, weight=1)

        self.entry_search = ctk.CTkEntry(row, placeholder_text="🔍 Пошук за назвою", height=34)
        self.entry_search.grid(row=0, column=0, sticky="ew", padx=(12, 8), pady=10)
        self.entry_search.bind("<KeyRelease>", lambda e: self._on_filter_changed())

        self.filter_channel = ctk.CTkOptionMenu(row, values=[FILTER_ALL, *CHANNELS], width=140,
                                                command=lambda _: self._on_filter_changed())
        self.filter_channel.set(FILTER_ALL)
        self.filter_channel.grid(row=0, column=1, padx=4, pady=10)

        self.filter_status = ctk.CTkOptionMenu(row, values=[FILTER_ALL, *STATUSES], width=140,
                                               command=lambda _: self._on_filter_changed())
        self.filter_status.set(FILTER_ALL)
        self.filter_status.grid(row=0, column=2, padx=4, pady=10)

        self.lbl_count = ctk.CTkLabel(row, text="", font=ctk.CTkFont(size=12),
                                      text_color="gray", width=130)
        self.lbl_count.grid(row=0, column=3, padx=(4, 12), pady=10)

    def _build_table(self):
        frame = ctk.CTkFrame(self.main_frame)
        frame.grid(row=2, column=0, sticky="nsew", padx=20, pady=(0, 10))
        frame.grid_columnconfigure(0, weight=1)
        frame.grid_rowconfigure(0, weight=1)

        style = ttk.Style(self)
        style.theme_use("default")
        style.configure("Campaigns.Treeview", background="#2b2b2b", foreground="#dce4ee",
                        fieldbackground="#2b2b2b", rowheight=26, borderwidth=0)
        style.configure("Campaigns.Treeview.Heading", background="#1f538d",
                        foreground="white", relief="flat")
        style.map("Campaigns.Treeview", background=[("selected", "#1f538d")])

        self.table = ttk.Treeview(frame, style="Campaigns.Treeview", selectmode="browse",
                                  columns=[key for key, _, _ in TABLE_COLUMNS], show="headings")
        for key, title, width in TABLE_COLUMNS:
            self.table.heading(key, text=title)
            self.table.column(key, width=width, anchor="w" if key == "name" else "e")
        self.table.grid(row=0, column=0, sticky="nsew", padx=(4, 0), pady=4)
        self.table.bind("<<TreeviewSelect>>", self._on_table_select)

        scroll = ctk.CTkScrollbar(frame, command=self.table.yview)
        scroll.grid(row=0, column=1, sticky="ns", pady=4)
        self.table.configure(yscrollcommand=scroll.set)

    def _build_log(self):
        bottom = ctk.CTkFrame(self.main_frame)
        bottom.grid(row=3, column=0, sticky="ew", padx=20, pady=(0, 15))
        bottom.grid_columnconfigure(0, weight=1)

        self.lbl_status = ctk.CTkLabel(bottom, text="", font=ctk.CTkFont(size=13),
                                       anchor="w")
        self.lbl_status.grid(row=0, column=0, sticky="ew", padx=12, pady=(8, 4))

        self.lbl_last_sync = ctk.CTkLabel(bottom, text="",
                                          font=ctk.CTkFont(size=11), text_color="gray")
        self.lbl_last_sync.grid(row=0, column=1, sticky="e", padx=12, pady=(8, 4))

        self.log_text = ctk.CTkTextbox(bottom, height=90,
                                       font=ctk.CTkFont(family="Menlo", size=12))
        self.log_text.grid(row=1, column=0, columnspan=2, sticky="ew", padx=2, pady=(0, 2))

    # ─────────────────────────────────────────
    #  STORE ↔ VIEW
    # ─────────────────────────────────────────

    def _reload_store(self):
        """Перечитує базу з файлу та оновлює таблицю."""
        self.lbl_db_path.configure(text=self.store.path)
        try:
            count = self.store.load()
        except OSError as e:
            logger.error(f"❌ Не вдалося прочитати базу: {e}")
            messagebox.showerror("Помилка", f"Не вдалося прочитати базу:\n\n{e}")
            count = 0
        self._log(f"📂 База: {self.store.path} | Кампаній: {count}")
        self._refresh_view()

    def _current_filters(self) -> tuple:
        return (self.entry_search.get(), self.filter_channel.get(), self.filter_status.get())

    def _refresh_view(self):
        """Перераховує видимий список, таблицю та KPI."""
        search, channel, status = self._current_filters()
        self.visible = filter_campaigns(self.store, search, channel, status)

        self.table.delete(*self.table.get_children())
        self.rows.clear()
        for i, c in enumerate(self.visible):
            iid = str(i)
            self.rows[iid] = c
            self.table.insert("", "end", iid=iid, values=(
                c.name, c.channel, c.status,
                f"{c.budget:.2f}", c.impressions, c.clicks, c.conversions,
                f"{c.revenue:.2f}", f"{c.ctr:.2f}", f"{c.cpc:.2f}",
                f"{c.cpa:.2f}", f"{c.roi:.2f}",
            ))

        if has_any_filter(search, channel, status):
            self.lbl_count.configure(text=f"Показано: {len(self.visible)} із {len(self.store)}")
        else:
            self.lbl_count.configure(text=f"Всього: {len(self.store)}")

        texts = format_kpis(aggregate(self.visible))
        for key, label in self.kpi_labels.items():
            label.configure(text=texts[key])
        self.lbl_last_sync.configure(
            text=f"Оновлено: {datetime.now().strftime('%d.%m.%Y %H:%M:%S')}")

    def _on_filter_changed(self):
        self._refresh_view()

    def _selected_campaign(self):
        selection = self.table.selection()
        if not selection:
            return None
        return self.rows.get(selection[0])

    def _on_table_select(self, event=None):
        selected = self._selected_campaign()
        if selected is None:
            return

        self._fill_form(selected)
        self._set_status(f"Обрано кампанію: {selected.name}")

    # ─────────────────────────────────────────
    #  FORM
    # ─────────────────────────────────────────

    def _read_form(self):
        """Returns: Campaign. Raises: ValidationError"""
        def option(menu):
            value = menu.get()
            return "" if value == NOT_SELECTED else value

        return parse_form(
            name=self.entry_name.get(),
            channel=option(self.opt_channel),
            status=option(self.opt_status),
            budget=self.entry_budget.get(),
            impressions=self.entry_impressions.get(),
            clicks=self.entry_clicks.get(),
            conversions=self.entry_conversions.get(),
            revenue=self.entry_revenue.get(),
        )

    def _fill_form(self, c):
        self._clear_form()
        self.entry_name.insert(0, c.name)
        self.opt_channel.set(c.channel if c.channel in CHANNELS else NOT_SELECTED)
        self.opt_status.set(c.status if c.status in STATUSES else NOT_SELECTED)
        self.entry_budget.insert(0, str(c.budget))
        self.entry_impressions.insert(0, str(c.impressions))
        self.entry_clicks.insert(0, str(c.clicks))
        self.entry_conversions.insert(0, str(c.conversions))
        self.entry_revenue.insert(0, str(c.revenue))

    def _clear_form(self):
        for entry in (self.entry_name, self.entry_budget, self.entry_impressions,
                      self.entry_clicks, self.entry_conversions, self.entry_revenue):
            entry.delete(0, "end")
        self.opt_channel.set(NOT_SELECTED)
        self.opt_status.set(NOT_SELECTED)
        self.lbl_forecast.configure(text="")

    # ─────────────────────────────────────────
    #  ACTIONS
    # ─────────────────────────────────────────

    def _add_campaign(self):
        try:
            candidate = self._read_form()
            self.store.add(candidate)
        except AdStatsError as e:
            self._set_status(f"❌ {e}", error=True)
            return
        except OSError as e:
            self._on_io_error(e)
            return

        self._refresh_view()
        self._clear_form()
        self._set_status(f"✅ Кампанію '{candidate.name}' додано.")

    def _update_campaign(self):
        selected = self._selected_campaign()
        if selected is None:
            self._set_status("Оберіть кампанію в таблиці для оновлення.", error=True)
            return

        try:
            updated = self._read_form()
            self.store.update(selected, updated)
        except AdStatsError as e:
            self._set_status(f"❌ Неможливо оновити: {e}", error=True)
            return
        except OSError as e:
            self._on_io_error(e)
            return

        self._refresh_view()
        self._set_status(f"✅ Кампанію '{selected.name}' оновлено.")

    def _delete_campaign(self):
        selected = self._selected_campaign()
        if selected is None:
            self._set_status("Оберіть кампанію, яку потрібно видалити.", error=True)
            return

        confirm = messagebox.askyesno(
            "⚠️ Підтвердження",
            f"Видалити кампанію «{selected.name}»?",
            icon="warning"
        )
        if not confirm:
            return

        try:
            self.store.remove(selected)
        except OSError as e:
            self._on_io_error(e)
            return

        self._refresh_view()
        self._clear_form()
        self._set_status("🗑️ Кампанію видалено.")

    def _save_clicked(self):
        try:
            self.store.save()
        except OSError as e:
            self._on_io_error(e)
            return
        self._set_status("💾 Дані збережено вручну.")

    def _clear_form_clicked(self):
        self._clear_form()
        self.table.selection_remove(*self.table.selection())
        self._set_status("Форму очищено.")

    def _forecast_clicked(self):
        if len(self.store) == 0:
            self.lbl_forecast.configure(text="Додайте хоча б одну кампанію, щоб побудувати прогноз.")
            return

        try:
            growth = parse_real(self.entry_growth.get())
        except ValueError:
            self._set_status("Введіть коректний відсоток зміни бюджету (не менше -100).", error=True)
            return

        try:
            fc = forecast(self.store, growth)
        except ValidationError as e:
            self._set_status(f"❌ {e}", error=True)
            return

        self.lbl_forecast.configure(text=format_forecast(fc))
        self._set_status("🔮 Прогноз розраховано.")

    def _pick_database_file(self):
        path = filedialog.asksaveasfilename(
            title="Оберіть файл бази",
            initialfile=DATABASE_FILENAME,
            initialdir=os.path.dirname(self.store.path),
            defaultextension=".txt",
            confirmoverwrite=False,
            filetypes=[("Text files", "*.txt"), ("All files", "*.*")]
        )
        if not path:
            return

        self._save_settings(database_file=path)
        self.store = CampaignStore(path)
        self._clear_form()
        self._reload_store()
        self._set_status("📁 Файл бази змінено.")

    # ─────────────────────────────────────────
    #  HELPERS
    # ─────────────────────────────────────────

    def _on_io_error(self, error: OSError):
        logger.error(f"❌ Помилка запису бази {self.store.path}: {error}")
        self._set_status("❌ Не вдалося записати файл бази.", error=True)
        messagebox.showerror("Помилка", f"Не вдалося записати файл бази:\n\n{error}")

    def _set_status(self, message: str, error: bool = False):
        self.lbl_status.configure(text=message,
                                  text_color="#dc3545" if error else ("gray10", "gray90"))
        self._log(message)

    def _log(self, message: str):
        """Додає рядок у лог."""
        timestamp = datetime.now().strftime("%H:%M:%S")
        self.log_text.insert("end", f"[{timestamp}] {message}\n")
        self.log_text.see("end")
