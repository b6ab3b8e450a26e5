import html

STATUS_COLORS = {
    "future":   ("#f3f4f6", "#9ca3af"),
    "empty":    ("#fee2e2", "#b91c1c"),
    "partial":  ("#fef9c3", "#92400e"),
    "complete": ("#dcfce7", "#15803d"),
}


def _status_style(status: str) -> str:
    bg, fg = STATUS_COLORS.get(status, STATUS_COLORS["empty"])
    return f"background:{bg};color:{fg};"


def _nav_bar(active: str = "") -> str:
    def lnk(href, label, key):
        if active == key:
            s = "color:#fff; font-weight:600; border-bottom:2px solid rgba(255,255,255,0.8); padding-bottom:2px;"
        else:
            s = "color:rgba(255,255,255,0.7); font-weight:500;"
        return f'<a href="{href}" style="text-decoration:none; font-size:14px; {s}">{label}</a>'
    return (
        '<nav style="background:#1e3a8a;">'
        '<div style="padding:0 24px; height:52px; display:flex; align-items:center; gap:20px;">'
        '<span style="font-weight:800; color:#fff; font-size:15px; flex-shrink:0;">'
        'מעקב טיפות עיניים</span>'
        + lnk("/day", "יום טיפול", "day")
        + lnk("/setup", "תאריך התחלה", "setup")
        + '</div>'
        '</nav>'
    )


def _error_banner(error: str) -> str:
    return f'<div class="alert">{html.escape(error)}</div>' if error else ""


PAGE_STYLE = """
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <script>
    (function () {
      function setCookie(name, value) {
        document.cookie = name + "=" + encodeURIComponent(value) + "; path=/; max-age=31536000; SameSite=Lax";
      }
      setCookie("tz_offset", String(new Date().getTimezoneOffset()));
    })();
  </script>
  <style>
    body { font-family: system-ui, sans-serif; background: #f5f5f5; margin: 0; padding: 0; color: #222; }
    .container { max-width: 560px; margin: 0 auto; padding: 24px; }
    h1 { margin-bottom: 4px; }
    .card { background: #fff; border: 1px solid #e0e0e0; border-radius: 8px; padding: 16px; margin: 12px 0; }
    .btn-primary { background: #3b82f6; color: #fff; border: none; border-radius: 8px;
                   padding: 10px 22px; font-size: 15px; cursor: pointer; font-weight: 600; }
    .btn-primary:hover { background: #2563eb; }
    .btn-nav { background: #fff; border: 1px solid #d1d5db; border-radius: 8px; padding: 6px 14px;
               font-size: 14px; cursor: pointer; font-family: inherit; }
    .btn-nav:disabled { color: #d1d5db; cursor: default; }
    .form-group { margin-bottom: 20px; }
    label { display: block; font-weight: 600; font-size: 14px; margin-bottom: 6px; }
    input[type=date] { width: 100%; box-sizing: border-box; border: 1px solid #d1d5db;
      border-radius: 6px; padding: 8px 10px; font-size: 15px; font-family: inherit; }
    input[type=date]:focus { outline: 2px solid #3b82f6; border-color: transparent; }
    .alert { background: #fee2e2; border: 1px solid #fca5a5; color: #b91c1c;
             border-radius: 6px; padding: 10px 14px; margin-bottom: 16px; font-size: 14px; }
    .warning { background: #fef9c3; border: 1px solid #fde047; color: #854d0e;
               border-radius: 6px; padding: 10px 14px; margin-bottom: 16px; font-size: 14px; }
    .empty { color: #888; font-style: italic; margin-top: 16px; }
    .day-header { display: flex; align-items: center; justify-content: space-between; gap: 10px; }
    .day-title { font-size: 16px; font-weight: 700; text-align: center; }
    .medication-card h3 { margin: 0 0 10px; font-size: 16px; }
    .dose-list { list-style: none; margin: 0; padding: 0; }
    .dose-item { display: flex; align-items: center; justify-content: space-between;
                 padding: 6px 0; border-bottom: 1px solid #f3f4f6; }
    .dose-taken { color: #15803d; text-decoration: line-through; }
    .btn { border-radius: 7px; padding: 5px 12px; font-size: 13px; cursor: pointer; font-family: inherit; font-weight: 600; }
    .take-btn { background: #15803d; color: #fff; border: none; }
    .taken-btn { background: #fff; color: #15803d; border: 1px solid #86efac; }
    .progress-grid { display: grid; grid-template-columns: repeat(10, 1fr); gap: 4px; }
    .day-box { border: none; border-radius: 6px; padding: 6px 0; font-size: 12px; font-weight: 700;
               cursor: pointer; font-family: inherit; width: 100%; }
    .day-current { outline: 2px solid #1e3a8a; }
    @media (max-width: 640px) {
      .container { padding: 16px; }
      .progress-grid { grid-template-columns: repeat(6, 1fr); }
    }
  </style>
"""
