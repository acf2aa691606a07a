from __future__ import annotations

import html
import json
import math
from typing import Optional

import bleach
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from gs_portfolio.core.config import settings
from gs_portfolio.core.database import get_db
from gs_portfolio.dependencies.auth import AdminContext, get_optional_admin
from gs_portfolio.models.gs_file import GSFile
from gs_portfolio.repositories import GSFileRepository
from gs_portfolio.viewer import build_scene

router = APIRouter(tags=["Pages"])

ALLOWED_TAGS = {"p", "br", "strong", "em", "b", "i", "ul", "ol", "li", "a", "code"}
ALLOWED_ATTRS = {"a": ["href", "title", "rel"]}

BASE_STYLE = """
:root { --bg:#0b0d10; --card:#151a20; --fg:#e7edf3; --muted:#9fb0c3; --btn:#2a7cff; --chip:#2b3340; --err:#ff6b6b; }
html,body { height:100%; }
body { margin:0; background:var(--bg); color:var(--fg); font-family: ui-sans-serif, system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial; }
header { display:flex; justify-content:space-between; align-items:center; padding:14px 20px; border-bottom:1px solid #24303d; }
header a { color:var(--fg); text-decoration:none; font-weight:600; }
.wrap { max-width:1100px; margin:0 auto; padding:28px 16px; }
h1 { font-size:22px; margin:0 0 12px; }
.card { background:var(--card); border-radius:18px; padding:18px; box-shadow:0 10px 30px rgba(0,0,0,.25); }
.grid { display:grid; grid-template-columns:repeat(auto-fill, minmax(240px, 1fr)); gap:16px; }
.thumb { width:100%; aspect-ratio:4/3; object-fit:cover; border-radius:12px; background:#0f1318; display:flex; align-items:center; justify-content:center; color:var(--muted); }
.row { display:flex; gap:12px; align-items:center; flex-wrap:wrap; }
input[type=text], input[type=password], textarea { background:#0f1318; color:var(--fg); border:1px solid #222a33; border-radius:10px; padding:10px 12px; min-width:260px; }
button, .btn { background:var(--btn); color:white; border:0; border-radius:10px; padding:10px 14px; cursor:pointer; font-weight:600; text-decoration:none; display:inline-block; }
button.secondary, .chip { background:var(--chip); color:#d7e1ea; }
table { width:100%; border-collapse: collapse; margin-top:14px; }
th, td { text-align:left; padding:10px 8px; border-bottom:1px solid #24303d; vertical-align: top; }
canvas { width:100%; height:384px; background:#191919; border-radius:12px; }
.muted { color:var(--muted); }
.small { font-size:12px; }
.error { color:var(--err); }
.mono { font-family: ui-monospace, SFMono-Regular, Menlo, Consolas, "Liberation Mono", monospace; }
"""

LOGIN_SCRIPT = """
document.getElementById('login').addEventListener('submit', async (ev) => {
  ev.preventDefault();
  const status = document.getElementById('status');
  status.textContent = '';
  try {
    const resp = await fetch('/api/admin/login', {
      method: 'POST', credentials: 'include',
      headers: { 'Content-Type': 'application/json' },
      body: JSON.stringify({ username: ev.target.username.value, password: ev.target.password.value }),
    });
    const body = await resp.json();
    if (!resp.ok || !body.success) { status.textContent = body.error || body.message || 'Login failed'; return; }
    window.location.href = '/admin/dashboard';
  } catch (e) {
    status.textContent = 'A network error occurred. Please check your connection.';
  }
});
"""

LOGOUT_SCRIPT = """
async function logout() {
  try { await fetch('/api/admin/logout', { method: 'POST', credentials: 'include' }); }
  finally { window.location.href = '/admin'; }
}
"""

FILES_SCRIPT = """
const MAX_GS = %(max_gs)d, MAX_THUMB = %(max_thumb)d;
const THUMB_TYPES = ['image/jpeg', 'image/png', 'image/webp'];
function show(msg) { document.getElementById('status').textContent = msg; }

async function call(url, opts) {
  try {
    const resp = await fetch(url, Object.assign({ credentials: 'include' }, opts));
    const body = await resp.json();
    if (!resp.ok || !body.success) { show(body.error || body.message || ('Request failed: ' + resp.status)); return null; }
    return body;
  } catch (e) {
    show('A network error occurred. Please check your connection.');
    return null;
  }
}

document.getElementById('upload').addEventListener('submit', async (ev) => {
  ev.preventDefault();
  const form = ev.target;
  const gs = form.file.files[0], thumb = form.thumbnail.files[0];
  if (!gs) { show('Please choose a .splat or .ply file.'); return; }
  const ext = gs.name.toLowerCase().split('.').pop();
  if (ext !== 'splat' && ext !== 'ply') { show('Unsupported file format. Only .splat and .ply files are supported.'); return; }
  if (gs.size > MAX_GS) { show('File is too large.'); return; }
  if (thumb && (!THUMB_TYPES.includes(thumb.type) || thumb.size > MAX_THUMB)) { show('Thumbnail must be JPEG, PNG or WebP and at most 5MB.'); return; }
  if (!form.display_name.value.trim()) { show('Display name is required.'); return; }
  show('Uploading…');
  if (await call('/api/admin/gs-files', { method: 'POST', body: new FormData(form) })) window.location.reload();
});

async function editFile(id, currentName) {
  const name = prompt('Display name', currentName);
  if (name === null) return;
  const description = prompt('Description (leave empty to keep)', '');
  const body = JSON.stringify({ display_name: name, description: description || null });
  if (await call('/api/admin/gs-files/' + id, { method: 'PUT', headers: { 'Content-Type': 'application/json' }, body })) window.location.reload();
}

async function deleteFile(id) {
  if (!confirm('Delete this file?')) return;
  if (await call('/api/admin/gs-files/' + id, { method: 'DELETE' })) window.location.reload();
}
"""


def _human_size(n: Optional[int]) -> str:
    if n is None:
        return "unknown"
    units = ["B", "KB", "MB", "GB", "TB"]
    if n == 0:
        return "0 B"
    p = min(int(math.log(n, 1024)), len(units) - 1)
    return f"{n / (1024 ** p):.2f} {units[p]}"


def _embed_json(data) -> str:
    # script content is raw text; only a closing tag can break out of it
    return json.dumps(data).replace("</", "<\\/")


def _clean(text: Optional[str]) -> str:
    if not text:
        return ""
    return bleach.clean(text, tags=ALLOWED_TAGS, attributes=ALLOWED_ATTRS, strip=True)


def _page(title: str, body: str, script: str = "", admin: Optional[AdminContext] = None) -> HTMLResponse:
    nav = '<a href="/admin/dashboard">Dashboard</a>' if admin else '<a href="/admin">Admin</a>'
    html_page = f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width, initial-scale=1"/>
  <title>{html.escape(title)} · {settings.PROJECT_NAME}</title>
  <style>{BASE_STYLE}</style>
</head>
<body>
  <header><a href="/">{settings.PROJECT_NAME}</a><nav>{nav}</nav></header>
  <div class="wrap">{body}</div>
  <script>{script}</script>
</body>
</html>"""
    return HTMLResponse(html_page, headers={"Cache-Control": "no-store"})


def _file_card(f: GSFile) -> str:
    name = html.escape(f.display_name)
    if f.thumbnail_path:
        thumb = f'<img class="thumb" src="/api/gs-files/{f.id}/thumbnail" alt="{name}"/>'
    else:
        thumb = '<div class="thumb">No thumbnail</div>'
    return f"""
    <a class="card" href="/files/{f.id}" style="color:inherit;text-decoration:none;">
      {thumb}
      <h3>{name}</h3>
      <div class="muted small">{_clean(f.description)}</div>
      <div class="muted small">{_human_size(f.file_size)} · {f.upload_date:%Y-%m-%d}</div>
    </a>"""


@router.get("/", response_class=HTMLResponse)
async def home(
    page: int = Query(1, ge=1),
    db: AsyncSession = Depends(get_db),
    admin: Optional[AdminContext] = Depends(get_optional_admin),
):
    rows, pagination = await GSFileRepository(db).find_all(page=page, limit=settings.DEFAULT_PAGE_SIZE)
    if rows:
        grid = '<div class="grid">' + "".join(_file_card(f) for f in rows) + "</div>"
    else:
        grid = '<p class="muted">No files have been published yet.</p>'

    links = []
    if pagination.page > 1:
        links.append(f'<a class="btn secondary" href="/?page={pagination.page - 1}">Previous</a>')
    if pagination.page < pagination.total_pages:
        links.append(f'<a class="btn secondary" href="/?page={pagination.page + 1}">Next</a>')
    pager = f'<div class="row" style="margin-top:16px;">{"".join(links)}<span class="muted small">' \
            f'Page {pagination.page} of {max(pagination.total_pages, 1)} · {pagination.total} file(s)</span></div>'

    body = f"<h1>Gaussian Splatting Portfolio</h1>{grid}{pager}"
    return _page("Gallery", body, admin=admin)


@router.get("/files/{file_id}", response_class=HTMLResponse)
async def file_detail(
    file_id: int,
    db: AsyncSession = Depends(get_db),
    admin: Optional[AdminContext] = Depends(get_optional_admin),
):
    f = await GSFileRepository(db).find_by_id(file_id)
    if f is None:
        raise HTTPException(status_code=404, detail="File not found")

    file_url = f"/api/gs-files/{f.id}/file"
    scene = build_scene(file_url, f)
    if scene["ready"]:
        viewer = (
            '<canvas id="gs-viewer"></canvas>'
            f'<script type="application/json" id="gs-scene">{_embed_json(scene)}</script>'
            '<p class="muted small">Left-drag to rotate · right-drag to pan · wheel to zoom</p>'
        )
    else:
        viewer = f'<p class="error">{html.escape(scene["error"])}</p>'

    thumb = (
        f'<img class="thumb" style="max-width:320px" src="/api/gs-files/{f.id}/thumbnail" alt=""/>'
        if f.thumbnail_path else ""
    )
    body = f"""
    <p><a class="btn secondary" href="/">← Back</a></p>
    <div class="card">
      <h1>{html.escape(f.display_name)}</h1>
      <div class="muted">{_clean(f.description)}</div>
      {viewer}
      <table>
        <tr><th>File name</th><td class="mono">{html.escape(f.filename)}</td></tr>
        <tr><th>Size</th><td>{_human_size(f.file_size)}</td></tr>
        <tr><th>Type</th><td class="mono">{html.escape(f.mime_type)}</td></tr>
        <tr><th>Uploaded</th><td>{f.upload_date:%Y-%m-%d %H:%M}</td></tr>
        <tr><th>Updated</th><td>{f.updated_date:%Y-%m-%d %H:%M}</td></tr>
      </table>
      {thumb}
      <div class="row" style="margin-top:16px;"><a class="btn" href="{file_url}">Download</a></div>
    </div>"""
    return _page(f.display_name, body, admin=admin)


@router.get("/admin", response_class=HTMLResponse)
async def admin_login_page(admin: Optional[AdminContext] = Depends(get_optional_admin)):
    if admin is not None:
        return RedirectResponse("/admin/dashboard", status_code=303)
    body = """
    <div class="card" style="max-width:420px;margin:0 auto;">
      <h1>Admin login</h1>
      <form id="login">
        <p><input type="text" name="username" placeholder="Username" autocomplete="username" required/></p>
        <p><input type="password" name="password" placeholder="Password" autocomplete="current-password" required/></p>
        <button type="submit">Log in</button>
      </form>
      <p id="status" class="error small"></p>
    </div>"""
    return _page("Admin login", body, LOGIN_SCRIPT)


@router.get("/admin/dashboard", response_class=HTMLResponse)
async def admin_dashboard_page(
    db: AsyncSession = Depends(get_db),
    admin: Optional[AdminContext] = Depends(get_optional_admin),
):
    if admin is None:
        return RedirectResponse("/admin", status_code=303)
    _, pagination = await GSFileRepository(db).find_all(page=1, limit=1)
    last_login = f"{admin.user.last_login:%Y-%m-%d %H:%M}" if admin.user.last_login else "never"
    body = f"""
    <div class="row" style="justify-content:space-between;">
      <h1>Admin dashboard</h1>
      <button class="secondary" onclick="logout()">Log out</button>
    </div>
    <div class="grid">
      <div class="card"><h3>File management</h3>
        <p class="muted small">Upload, edit and delete Gaussian Splatting files.</p>
        <a class="btn" href="/admin/files">Manage files</a></div>
      <div class="card"><h3>Statistics</h3>
        <p>{pagination.total} published file(s)</p></div>
      <div class="card"><h3>Account</h3>
        <p>{html.escape(admin.user.username)}</p>
        <p class="muted small">Last login: {last_login}</p></div>
    </div>"""
    return _page("Dashboard", body, LOGOUT_SCRIPT, admin=admin)


@router.get("/admin/files", response_class=HTMLResponse)
async def admin_files_page(
    page: int = Query(1, ge=1),
    db: AsyncSession = Depends(get_db),
    admin: Optional[AdminContext] = Depends(get_optional_admin),
):
    if admin is None:
        return RedirectResponse("/admin", status_code=303)
    rows, pagination = await GSFileRepository(db).find_all(page=page, limit=settings.MAX_PAGE_SIZE)

    table_rows = "".join(
        f"""<tr>
          <td class="mono small">{f.id}</td>
          <td><div>{html.escape(f.display_name)}</div><div class="muted small mono">{html.escape(f.filename)}</div></td>
          <td>{_human_size(f.file_size)}</td>
          <td class="small">{f.upload_date:%Y-%m-%d %H:%M}</td>
          <td><button class="secondary" onclick='editFile({f.id}, {html.escape(json.dumps(f.display_name))})'>Edit</button>
              <button onclick="deleteFile({f.id})">Delete</button></td>
        </tr>"""
        for f in rows
    )
    body = f"""
    <h1>File management</h1>
    <div class="card">
      <h3>Upload</h3>
      <form id="upload">
        <p><input type="text" name="display_name" placeholder="Display name" required/></p>
        <p><textarea name="description" placeholder="Description (optional)"></textarea></p>
        <p>Splat file (.splat, .ply): <input type="file" name="file" accept=".splat,.ply"/></p>
        <p>Thumbnail (optional): <input type="file" name="thumbnail" accept="image/jpeg,image/png,image/webp"/></p>
        <button type="submit">Upload</button>
      </form>
      <p id="status" class="error small"></p>
    </div>
    <div class="card" style="margin-top:14px;">
      <span class="muted small">{pagination.total} file(s)</span>
      <table>
        <thead><tr><th>ID</th><th>Name</th><th>Size</th><th>Uploaded</th><th>Actions</th></tr></thead>
        <tbody>{table_rows}</tbody>
      </table>
    </div>"""
    script = FILES_SCRIPT % {"max_gs": settings.MAX_GS_FILE_SIZE, "max_thumb": settings.MAX_THUMBNAIL_SIZE}
    return _page("Files", body, script, admin=admin)
