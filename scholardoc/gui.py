"""Tkinter front end.

Each button runs one pipeline step on the TaskRunner; the window polls
the runner's queue and appends log lines.
"""

import os
import subprocess
import sys
import tkinter as tk
from tkinter import messagebox, scrolledtext

from . import __version__
from .config import ProjectLayout
from .pipeline import ScholarshipPipeline
from .worker import DoneEvent, LogEvent, StatusEvent, TaskRunner

POLL_MS = 100

STEPS = [
    ("Validate documents", "validate"),
    ("Convert to PDF", "convert"),
    ("Merge PDFs", "merge"),
    ("Analyze content", "analyze"),
    ("Generate reports", "report"),
    ("Run all", "run_all"),
]


class MainWindow:

    def __init__(self, layout: ProjectLayout = None):
        self.layout = layout or ProjectLayout.from_env()
        self.runner = TaskRunner()

        self.root = tk.Tk()
        self.root.title("Scholarship Document Tool")
        self.root.geometry("800x600")

        self.status = tk.StringVar(value="Ready")
        self.step_buttons = []
        self.create_widgets()

        self.root.after(POLL_MS, self.poll_events)

    def create_widgets(self):
        tk.Label(self.root, text="Scholarship Document Tool", font=("Arial", 16, "bold")).pack(pady=8)

        steps_frame = tk.Frame(self.root)
        steps_frame.pack(fill="x", padx=6)
        for label, step in STEPS:
            button = tk.Button(steps_frame, text=label, command=lambda s=step, l=label: self.run_step(s, l))
            button.pack(side="left", padx=3)
            self.step_buttons.append(button)

        tk.Label(self.root, textvariable=self.status, anchor="w").pack(fill="x", padx=6, pady=4)

        tk.Label(self.root, text="Log").pack(anchor="w", padx=6)
        self.log_text = scrolledtext.ScrolledText(self.root, height=20)
        self.log_text.pack(fill="both", expand=True, padx=6, pady=4)

        tools_frame = tk.Frame(self.root)
        tools_frame.pack(fill="x", padx=6, pady=6)
        tk.Button(tools_frame, text="Clear log", command=self.on_clear).pack(side="left")
        tk.Button(tools_frame, text="Open output folder", command=self.open_output_folder).pack(side="left", padx=6)
        tk.Button(tools_frame, text="About", command=self.show_about).pack(side="left")
        tk.Button(tools_frame, text="Quit", command=self.root.destroy).pack(side="right")

    def run_step(self, step: str, label: str):
        if self.runner.busy:
            return

        def task(sink):
            pipeline = ScholarshipPipeline(self.layout, sink=sink)
            return getattr(pipeline, step)()

        self._set_buttons("disabled")
        self.runner.submit(label, task)

    def poll_events(self):
        for event in self.runner.drain():
            if isinstance(event, LogEvent):
                stamp = event.timestamp.strftime("%H:%M:%S")
                self.log_text.insert("end", f"[{stamp}] {event.message}\n")
                self.log_text.see("end")
            elif isinstance(event, StatusEvent):
                self.status.set(event.status)
            elif isinstance(event, DoneEvent):
                self._set_buttons("normal")

        self.root.after(POLL_MS, self.poll_events)

    def _set_buttons(self, state: str):
        for button in self.step_buttons:
            button.configure(state=state)

    def on_clear(self):
        self.log_text.delete("1.0", "end")

    def open_output_folder(self):
        folder = self.layout.product_dir
        folder.mkdir(parents=True, exist_ok=True)

        if sys.platform.startswith("win"):
            os.startfile(str(folder))
        elif sys.platform == "darwin":
            subprocess.run(["open", str(folder)])
        else:
            try:
                subprocess.run(["xdg-open", str(folder)])
            except FileNotFoundError:
                messagebox.showinfo("Output folder", str(folder.resolve()))

    def show_about(self):
        messagebox.showinfo(
            "About",
            f"Scholarship Document Tool {__version__}\n\n"
            "Validates, converts, merges and analyzes application documents.",
        )

    def run(self):
        self.root.mainloop()


def main():
    MainWindow().run()


if __name__ == "__main__":
    main()
