import tkinter as tk
from tkinter import ttk, filedialog, messagebox, simpledialog
from dataclasses import replace
from datetime import date
import logging

from matplotlib.figure import Figure
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg

# Local imports
import config
from document import read_schedule, save_filename, write_schedule
from editing import with_person_days, with_scheduled_end, with_scheduled_start
from exceptions import DocumentFormatError, UnsupportedVersionError
from interaction import InteractionResolver
from layout import ResizeHandle, TimelineView
from models import ActiveTask, Milestone, Schedule, TaskStatus, new_section, new_task
from renderer import draw_layout
from reports import section_summary
from status_machine import transition
from store import (AddHoliday, AddSection, AddTask, RemoveHoliday, RemoveSection, RemoveTask,
                   ReorderTask, ScheduleStore, SetEditable, SetSchedule, SetSkipWeekends,
                   UpdateSection, UpdateTask)

logger = logging.getLogger(__name__)


class GanttChartApp(tk.Tk):
    def __init__(self):
        super().__init__()
        self.title("Schedule Planner")
        self.geometry("1800x800")

        # --- App State ---
        self.store = ScheduleStore(config.default_schedule(), editable=False)
        self.view = TimelineView(viewport_width=1200)
        self.resolver = InteractionResolver(self.store, self.view)
        self.store.subscribe(self.on_store_change)

        # --- UI State ---
        self._pan_data = None
        self._drag_start_x = None
        self.current_filepath = None
        self.editable_var = tk.BooleanVar(value=self.store.editable)
        self.skip_weekends_var = tk.BooleanVar(value=self.store.schedule.skip_weekends)
        self.tooltip_var = tk.StringVar(value="")

        self.create_menu()

        # --- Main Layout ---
        self.main_frame = ttk.Frame(self)
        self.main_frame.pack(side=tk.TOP, fill=tk.BOTH, expand=True)

        self.control_frame = ttk.Frame(self.main_frame, width=700, padding="10")
        self.control_frame.pack(side=tk.LEFT, fill=tk.Y, expand=False)

        self.chart_frame = ttk.Frame(self.main_frame)
        self.chart_frame.pack(side=tk.RIGHT, fill=tk.BOTH, expand=True)

        ttk.Label(self, textvariable=self.tooltip_var, anchor='w', padding=4).pack(side=tk.BOTTOM, fill=tk.X)

        # --- Initialization ---
        self.setup_chart_canvas()
        self.build_controls()
        self.connect_chart_events()
        self.refresh()

    # --- Store plumbing ---

    @property
    def schedule(self):
        return self.store.schedule

    def dispatch(self, action):
        self.store.dispatch(action)

    def on_store_change(self, store):
        self.editable_var.set(store.editable)
        self.skip_weekends_var.set(store.schedule.skip_weekends)
        self.refresh()

    def refresh(self):
        self.populate_sections()
        self.populate_tasks()
        self.populate_holidays()
        self.draw_chart()
        self.update_window_title()

    def update_window_title(self):
        if self.current_filepath:
            self.title(f"Schedule Planner - {self.current_filepath}")
        else:
            self.title("Schedule Planner")

    # --- Menu ---

    def create_menu(self):
        menubar = tk.Menu(self)
        self.config(menu=menubar)

        file_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="File", menu=file_menu)
        file_menu.add_command(label="New Sample Project", command=self.new_sample_project)
        file_menu.add_command(label="New Blank Project", command=self.new_blank_project)
        file_menu.add_separator()
        file_menu.add_command(label="Open Project...", command=self.open_project)
        file_menu.add_command(label="Save Project As...", command=self.save_project_as)
        file_menu.add_command(label="Export Chart...", command=self.export_chart)
        file_menu.add_separator()
        file_menu.add_command(label="Exit", command=self.quit)

        view_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="View", menu=view_menu)
        view_menu.add_command(label="Reset Zoom && Pan", command=self.reset_view)

    def new_sample_project(self):
        self.current_filepath = None
        self.dispatch(SetSchedule(config.default_schedule()))

    def new_blank_project(self):
        self.current_filepath = None
        self.dispatch(SetSchedule(Schedule(sections=(new_section("Section 1"),))))

    def open_project(self):
        filepath = filedialog.askopenfilename(
            filetypes=[("Schedule Files", "*.json"), ("All Files", "*.*")]
        )
        if not filepath:
            return

        try:
            schedule = read_schedule(filepath)
        except UnsupportedVersionError:
            messagebox.showerror("Open Project", "Unsupported schedule version.")
            return
        except (DocumentFormatError, OSError, UnicodeDecodeError) as e:
            logger.warning("Could not load %s: %s", filepath, e)
            messagebox.showerror("Open Project", "Failed to parse the file. Please ensure it is a valid schedule JSON.")
            return

        self.current_filepath = filepath
        self.dispatch(SetSchedule(schedule))

    def save_project_as(self):
        filepath = filedialog.asksaveasfilename(
            defaultextension=".json",
            initialfile=save_filename(),
            filetypes=[("Schedule Files", "*.json"), ("All Files", "*.*")]
        )
        if not filepath:
            return

        try:
            write_schedule(self.schedule, filepath)
        except OSError as e:
            messagebox.showerror("Save Project", f"An error occurred while saving: {e}")
            return
        self.current_filepath = filepath
        self.update_window_title()

    def export_chart(self):
        if not self.schedule.tasks:
            messagebox.showinfo("Export Chart", "There is nothing to export.")
            return

        filepath = filedialog.asksaveasfilename(
            title="Export Gantt Chart",
            defaultextension=".png",
            filetypes=[("PNG Image", "*.png"), ("PDF Document", "*.pdf"), ("SVG Vector Image", "*.svg")]
        )
        if not filepath:
            return

        try:
            self.figure.savefig(filepath, bbox_inches='tight', dpi=300)
        except (OSError, ValueError) as e:
            messagebox.showerror("Export Error", f"An error occurred while exporting the chart: {e}")

    def reset_view(self):
        self.view.reset()
        self.resolver.relayout()
        self.draw_chart()

    # --- Controls ---

    def build_controls(self):
        settings_frame = ttk.LabelFrame(self.control_frame, text="Project Settings", padding="10")
        settings_frame.pack(fill=tk.X, pady=5)

        ttk.Checkbutton(settings_frame, text="Editable", variable=self.editable_var,
                        command=lambda: self.dispatch(SetEditable(self.editable_var.get()))).grid(row=0, column=0, sticky="w")
        ttk.Checkbutton(settings_frame, text="Skip Weekends", variable=self.skip_weekends_var,
                        command=lambda: self.dispatch(SetSkipWeekends(self.skip_weekends_var.get()))).grid(row=0, column=1, sticky="w")

        # Sections
        sections_frame = ttk.LabelFrame(self.control_frame, text="Sections", padding="10")
        sections_frame.pack(fill=tk.X, pady=5)

        columns = ("task_count", "person_days", "progress")
        self.section_tree = ttk.Treeview(sections_frame, columns=columns, show="tree headings", height=5)
        self.section_tree.heading("#0", text="Section")
        self.section_tree.heading("task_count", text="Tasks")
        self.section_tree.heading("person_days", text="Person Days")
        self.section_tree.heading("progress", text="Progress")
        for column in columns:
            self.section_tree.column(column, width=80, anchor='center')
        self.section_tree.pack(fill=tk.X)
        self.section_tree.bind("<Double-1>", lambda e: self.rename_section())

        section_actions = ttk.Frame(sections_frame)
        section_actions.pack(fill=tk.X, pady=5)
        ttk.Button(section_actions, text="Add Section", command=self.add_section).pack(side=tk.LEFT, padx=5)
        ttk.Button(section_actions, text="Remove Section", command=self.remove_section).pack(side=tk.LEFT, padx=5)

        # Tasks
        tasks_frame = ttk.LabelFrame(self.control_frame, text="Tasks", padding="10")
        tasks_frame.pack(fill=tk.BOTH, expand=True, pady=5)

        columns = ("section", "status", "start", "end", "person_days", "assignee", "progress")
        self.task_tree = ttk.Treeview(tasks_frame, columns=columns, show="tree headings", height=10)
        self.task_tree.heading("#0", text="Task")
        self.task_tree.column("#0", width=160, anchor='w')
        for column, heading in zip(columns, ("Section", "Status", "Start", "End", "Person Days", "Assignee", "Progress")):
            self.task_tree.heading(column, text=heading)
            self.task_tree.column(column, width=80, anchor='center')
        self.task_tree.pack(fill=tk.BOTH, expand=True)
        self.task_tree.bind("<<TreeviewSelect>>", self.on_task_selected)

        task_actions = ttk.Frame(tasks_frame)
        task_actions.pack(fill=tk.X, pady=5)
        ttk.Button(task_actions, text="Add Task", command=self.add_task).pack(side=tk.LEFT, padx=2)
        ttk.Button(task_actions, text="Remove", command=self.remove_task).pack(side=tk.LEFT, padx=2)
        ttk.Button(task_actions, text="↑", width=3, command=lambda: self.move_task(-1)).pack(side=tk.LEFT, padx=2)
        ttk.Button(task_actions, text="↓", width=3, command=lambda: self.move_task(1)).pack(side=tk.LEFT, padx=2)

        self.build_task_editor(tasks_frame)

        # Holidays
        holidays_frame = ttk.LabelFrame(self.control_frame, text="Holidays", padding="10")
        holidays_frame.pack(fill=tk.X, pady=5)
        self.holiday_list = tk.Listbox(holidays_frame, height=4)
        self.holiday_list.pack(fill=tk.X)
        holiday_actions = ttk.Frame(holidays_frame)
        holiday_actions.pack(fill=tk.X, pady=5)
        self.holiday_var = tk.StringVar()
        ttk.Entry(holiday_actions, textvariable=self.holiday_var, width=12).pack(side=tk.LEFT, padx=2)
        ttk.Button(holiday_actions, text="Add Holiday", command=self.add_holiday).pack(side=tk.LEFT, padx=2)
        ttk.Button(holiday_actions, text="Replace", command=self.replace_holiday).pack(side=tk.LEFT, padx=2)
        ttk.Button(holiday_actions, text="Remove Holiday", command=self.remove_holiday).pack(side=tk.LEFT, padx=2)

    def build_task_editor(self, master):
        editor = ttk.Frame(master)
        editor.pack(fill=tk.X, pady=5)
        self.editor_vars = {
            "name": tk.StringVar(), "section": tk.StringVar(), "status": tk.StringVar(),
            "start": tk.StringVar(), "end": tk.StringVar(), "person_days": tk.StringVar(),
            "assignee": tk.StringVar(), "progress": tk.StringVar(),
        }
        fields = [
            ("Name", "name"), ("Start (YYYY-MM-DD)", "start"), ("End (YYYY-MM-DD)", "end"),
            ("Person Days", "person_days"), ("Assignee", "assignee"), ("Progress %", "progress"),
        ]
        for row, (label, key) in enumerate(fields):
            ttk.Label(editor, text=label).grid(row=row, column=0, sticky="w", padx=5, pady=1)
            entry = ttk.Entry(editor, textvariable=self.editor_vars[key], width=30)
            entry.grid(row=row, column=1, sticky="w", padx=5, pady=1)
            entry.bind("<Return>", lambda e, k=key: self.commit_field(k))
            entry.bind("<FocusOut>", lambda e, k=key: self.commit_field(k))

        row = len(fields)
        ttk.Label(editor, text="Status").grid(row=row, column=0, sticky="w", padx=5)
        status_cb = ttk.Combobox(editor, textvariable=self.editor_vars["status"], state="readonly",
                                 values=[s.value for s in TaskStatus], width=27)
        status_cb.grid(row=row, column=1, sticky="w", padx=5)
        status_cb.bind("<<ComboboxSelected>>", lambda e: self.change_status())

        ttk.Label(editor, text="Section").grid(row=row + 1, column=0, sticky="w", padx=5)
        self.section_cb = ttk.Combobox(editor, textvariable=self.editor_vars["section"], state="readonly", width=27)
        self.section_cb.grid(row=row + 1, column=1, sticky="w", padx=5)
        self.section_cb.bind("<<ComboboxSelected>>", lambda e: self.commit_field("section"))

    def populate_sections(self):
        for iid in self.section_tree.get_children():
            self.section_tree.delete(iid)
        summary = section_summary(self.schedule)
        for row in summary.itertuples(index=False):
            self.section_tree.insert("", "end", iid=row.section_id, text=row.section_name or "(unnamed)",
                                     values=(row.task_count, row.person_days, f"{row.progress:.2f}%"))
        self.section_cb.configure(values=[s.section_name or s.section_id for s in self.schedule.sections])

    def populate_tasks(self):
        selected = self.selected_task_id()
        for iid in self.task_tree.get_children():
            self.task_tree.delete(iid)

        fmt = config.DOCUMENT_DATE_FORMAT
        for task in self.schedule.tasks:
            section = self.schedule.find_section(task.section_id)
            section_name = section.section_name if section else ""
            if isinstance(task, Milestone):
                values = (section_name, config.status_labels['milestone'], task.scheduled_date.strftime(fmt),
                          "", "N/A", task.assignee, "N/A")
            else:
                values = (section_name, config.status_labels[task.status.value],
                          task.scheduled_start_date.strftime(fmt), task.scheduled_end_date.strftime(fmt),
                          task.person_days, task.assignee, f"{task.progress}%")
            self.task_tree.insert("", "end", iid=task.task_id, text=task.task_name, values=values)

        if selected and self.task_tree.exists(selected):
            self.task_tree.selection_set(selected)

    def populate_holidays(self):
        self.holiday_list.delete(0, tk.END)
        for holiday in self.schedule.holidays:
            self.holiday_list.insert(tk.END, holiday.strftime(config.DOCUMENT_DATE_FORMAT))

    # --- Section actions ---

    def selected_section_id(self):
        selection = self.section_tree.selection()
        return selection[0] if selection else None

    def add_section(self):
        if self.guard_editable():
            self.dispatch(AddSection(new_section()))

    def rename_section(self):
        section_id = self.selected_section_id()
        if not section_id or not self.guard_editable():
            return
        section = self.schedule.find_section(section_id)
        name = simpledialog.askstring("Rename Section", "Section name:", initialvalue=section.section_name, parent=self)
        if name is not None:
            self.dispatch(UpdateSection(replace(section, section_name=name)))

    def remove_section(self):
        section_id = self.selected_section_id()
        if not section_id:
            messagebox.showwarning("Remove Section", "Please select a section to remove.")
            return
        if self.guard_editable():
            self.dispatch(RemoveSection(section_id))

    # --- Task actions ---

    def guard_editable(self):
        if not self.store.editable:
            messagebox.showinfo("Read Only", "Enable editing first.")
            return False
        return True

    def selected_task_id(self):
        selection = self.task_tree.selection()
        return selection[0] if selection else None

    def selected_task(self):
        task_id = self.selected_task_id()
        return self.schedule.find_task(task_id) if task_id else None

    def add_task(self):
        if not self.guard_editable():
            return
        if not self.schedule.sections:
            messagebox.showwarning("Add Task", "Please add a section first.")
            return
        self.dispatch(AddTask(new_task(self.schedule.sections[0].section_id, date.today())))

    def remove_task(self):
        task_id = self.selected_task_id()
        if not task_id:
            messagebox.showwarning("Remove Task", "Please select a task to remove.")
            return
        if self.guard_editable():
            self.dispatch(RemoveTask(task_id))

    def move_task(self, offset):
        task_id = self.selected_task_id()
        if not task_id or not self.guard_editable():
            return
        index = [t.task_id for t in self.schedule.tasks].index(task_id)
        self.dispatch(ReorderTask(task_id, index + offset))

    def on_task_selected(self, event=None):
        task = self.selected_task()
        if task is None:
            return
        fmt = config.DOCUMENT_DATE_FORMAT
        section = self.schedule.find_section(task.section_id)
        v = self.editor_vars
        v["name"].set(task.task_name)
        v["assignee"].set(task.assignee)
        v["status"].set(task.status.value)
        v["section"].set((section.section_name or section.section_id) if section else "")
        if isinstance(task, Milestone):
            v["start"].set(task.scheduled_date.strftime(fmt))
            v["end"].set("")
            v["person_days"].set("")
            v["progress"].set("")
        else:
            v["start"].set(task.scheduled_start_date.strftime(fmt))
            v["end"].set(task.scheduled_end_date.strftime(fmt))
            v["person_days"].set(str(task.person_days))
            v["progress"].set(str(task.progress))

    def change_status(self):
        task = self.selected_task()
        if task is None or not self.guard_editable():
            return
        updated = transition(task, self.editor_vars["status"].get())
        if updated is not task:
            self.dispatch(UpdateTask(updated))

    def commit_field(self, key):
        task = self.selected_task()
        if task is None or not self.store.editable:
            return
        value = self.editor_vars[key].get().strip()
        try:
            updated = self._edited_task(task, key, value)
        except ValueError as e:
            messagebox.showerror("Edit Task", f"Invalid value for {key}: {e}")
            self.on_task_selected()
            return
        if updated != task:
            self.dispatch(UpdateTask(updated))

    def _edited_task(self, task, key, value):
        if key == "name":
            return replace(task, task_name=value)
        if key == "assignee":
            return replace(task, assignee=value)
        if key == "section":
            section = next((s for s in self.schedule.sections if (s.section_name or s.section_id) == value), None)
            return replace(task, section_id=section.section_id) if section else task
        if key == "start":
            return with_scheduled_start(task, date.fromisoformat(value), self.schedule)
        if key == "end" and not isinstance(task, Milestone):
            return with_scheduled_end(task, date.fromisoformat(value), self.schedule)
        if key == "person_days" and not isinstance(task, Milestone):
            return with_person_days(task, int(value), self.schedule)
        if key == "progress" and isinstance(task, ActiveTask):
            return replace(task, progress=int(value))
        return task

    # --- Holiday actions ---

    def add_holiday(self):
        if not self.guard_editable():
            return
        holiday = self._entered_holiday()
        if holiday is None:
            return
        self.dispatch(AddHoliday(holiday))
        self.holiday_var.set("")

    def _entered_holiday(self):
        try:
            return date.fromisoformat(self.holiday_var.get().strip())
        except ValueError:
            messagebox.showerror("Holidays", "Please enter the date as YYYY-MM-DD.")
            return None

    def replace_holiday(self):
        selection = self.holiday_list.curselection()
        if not selection or not self.guard_editable():
            return
        holiday = self._entered_holiday()
        if holiday is None:
            return
        self.dispatch(RemoveHoliday(self.schedule.holidays[selection[0]]))
        self.dispatch(AddHoliday(holiday))
        self.holiday_var.set("")

    def remove_holiday(self):
        selection = self.holiday_list.curselection()
        if not selection or not self.guard_editable():
            return
        self.dispatch(RemoveHoliday(self.schedule.holidays[selection[0]]))

    # --- Chart ---

    def setup_chart_canvas(self):
        self.figure = Figure(figsize=(12, 4), dpi=100)
        self.ax = self.figure.add_axes([0, 0, 1, 1])
        self.canvas = FigureCanvasTkAgg(self.figure, self.chart_frame)
        self.canvas.get_tk_widget().pack(side=tk.TOP, fill=tk.BOTH, expand=True)
        self.canvas.get_tk_widget().bind("<Configure>", self.on_canvas_resize, add="+")

    def on_canvas_resize(self, event):
        if event.width > 1:
            self.view.viewport_width = event.width
            self.resolver.relayout()
            self.draw_chart()

    def draw_chart(self):
        draw_layout(self.ax, self.resolver.layout)
        self.canvas.draw_idle()

    def connect_chart_events(self):
        self.canvas.mpl_connect('button_press_event', self.on_press)
        self.canvas.mpl_connect('motion_notify_event', self.on_motion)
        self.canvas.mpl_connect('button_release_event', self.on_release)
        self.canvas.mpl_connect('scroll_event', self.on_scroll)

    def _pixels_to_data(self, dx):
        x0, x1 = self.ax.get_xlim()
        width = self.ax.get_window_extent().width or 1
        return dx * (x1 - x0) / width

    def on_press(self, event):
        if event.inaxes != self.ax or event.xdata is None:
            return

        hit = self.resolver.layout.hit_test(event.xdata, event.ydata)
        if isinstance(hit, ResizeHandle) and self.resolver.begin_drag(hit):
            self._drag_start_x = event.xdata
            self.canvas.get_tk_widget().config(cursor="sb_h_double_arrow")
            return

        self._pan_data = {"x": event.x}
        self.canvas.get_tk_widget().config(cursor="fleur")

    def on_motion(self, event):
        if self.resolver.drag is not None:
            if event.xdata is None:
                return
            self.resolver.drag_to(event.xdata - self._drag_start_x)
            self.draw_chart()
            return

        if self._pan_data is not None:
            self.resolver.pan(self._pixels_to_data(event.x - self._pan_data["x"]))
            self._pan_data["x"] = event.x
            self.draw_chart()
            return

        # --- Hover Logic ---
        if event.inaxes != self.ax or event.xdata is None:
            self.tooltip_var.set("")
            self.canvas.get_tk_widget().config(cursor="")
            return

        hit = self.resolver.layout.hit_test(event.xdata, event.ydata)
        if isinstance(hit, ResizeHandle):
            self.canvas.get_tk_widget().config(cursor="sb_h_double_arrow")
            hit = self.resolver.layout.row_for(hit.task_id)
        else:
            self.canvas.get_tk_widget().config(cursor="")
        if hit is not None:
            self.tooltip_var.set(hit.tooltip.replace("\n", "  |  "))
        elif self.resolver.layout.scale is not None:
            day = self.resolver.layout.scale.invert(event.xdata)
            self.tooltip_var.set(day.strftime(config.TOOLTIP_DATE_FORMAT))
        else:
            self.tooltip_var.set("")

    def on_release(self, event):
        if self.resolver.drag is not None:
            if event.inaxes != self.ax:
                self.resolver.cancel_drag()
                self.draw_chart()
            elif self.resolver.end_drag() is None:
                self.draw_chart()
        self._pan_data = None
        self._drag_start_x = None
        self.canvas.get_tk_widget().config(cursor="")

    def on_scroll(self, event):
        if event.key == 'control':
            anchor = event.xdata if event.xdata is not None else 0.0
            self.resolver.zoom(1.1 ** event.step, anchor)
        else:
            self.resolver.wheel(-event.step * 100)
        self.draw_chart()


def main():
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    app = GanttChartApp()
    app.mainloop()


if __name__ == "__main__":
    main()
