"""
Draws a computed timeline Layout onto a matplotlib Axes.

The axes' data coordinates are set up to match the layout's local pixel
space (y grows downwards), so event.xdata/event.ydata can be handed
straight back to Layout.hit_test.
"""
from matplotlib.patches import Polygon, Rectangle

import config


def _rect_patch(rect, **kwargs):
    return Rectangle((rect.x, rect.y), rect.width, rect.height, **kwargs)


def set_viewport(ax, layout):
    ox, oy = layout.origin
    ax.set_xlim(-ox, layout.viewport_width - ox)
    ax.set_ylim(layout.height - oy, -oy)
    ax.set_axis_off()


def draw_headers(ax, layout):
    for band in layout.month_bands:
        ax.add_patch(_rect_patch(band.rect, facecolor=config.header_colors['month'], edgecolor='white', lw=0.5))
        ax.text(band.label_x, band.label_y, band.label, fontsize=9, va='bottom', clip_on=True)
    for band in layout.day_bands:
        ax.add_patch(_rect_patch(band.rect, facecolor=config.header_colors['day'], edgecolor='white', lw=0.5))
        ax.text(band.label_x, band.label_y, band.label, fontsize=7, va='bottom', clip_on=True)


def draw_grid(ax, layout):
    for rect in layout.non_working:
        ax.add_patch(_rect_patch(rect, facecolor=config.header_colors['non_working'], edgecolor='none', zorder=0))
    for line in layout.grid_lines:
        ax.plot([line.x1, line.x2], [line.y1, line.y2], color=config.header_colors['grid'], lw=0.5, zorder=1)


def draw_rows(ax, layout):
    artists = {}
    for item in layout.rows:
        color = config.status_colors.get(item.status, 'gray')
        if hasattr(item, 'rect'):
            patch = _rect_patch(item.rect, facecolor=color, edgecolor='black', alpha=0.8, zorder=2)
        else:
            patch = Polygon(item.points, closed=True, facecolor=color, edgecolor='black', zorder=2)
        ax.add_patch(patch)
        label_y = item.row * config.ROW_HEIGHT + config.ROW_HEIGHT / 2
        ax.text(-10, label_y, item.label, ha='right', va='center', fontsize=9)
        artists[item.task_id] = patch
    return artists


def draw_handles(ax, layout):
    for handle in layout.handles:
        ax.add_patch(_rect_patch(handle.rect, facecolor='black', alpha=0.15, edgecolor='none', zorder=3))


def draw_progress_line(ax, layout):
    if not layout.progress_line:
        return None
    xs = [p[0] for p in layout.progress_line]
    ys = [p[1] for p in layout.progress_line]
    line, = ax.plot(xs, ys, color=config.header_colors['progress_line'], lw=2, zorder=4)
    return line


def draw_layout(ax, layout):
    """Clears `ax` and draws every primitive of `layout`; returns {task_id: patch}."""
    ax.clear()
    set_viewport(ax, layout)

    if not layout.rows:
        ax.text(0.5, 0.5, "No tasks to display.\nUse the File menu to start.",
                horizontalalignment='center', verticalalignment='center', transform=ax.transAxes)
        return {}

    draw_grid(ax, layout)
    draw_headers(ax, layout)
    artists = draw_rows(ax, layout)
    draw_handles(ax, layout)
    draw_progress_line(ax, layout)
    return artists
