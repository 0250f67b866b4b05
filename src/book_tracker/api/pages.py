"""Dashboard page served to signed-in users."""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["pages"])


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard() -> HTMLResponse:
    """Single-page dashboard that drives the book API."""
    return HTMLResponse(_DASHBOARD_HTML)


_DASHBOARD_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Book Tracker</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }
      .row { margin-bottom: 1rem; }
      input, select { padding: 0.4rem 0.6rem; margin-right: 0.5rem; }
      button { padding: 0.4rem 0.8rem; margin-right: 0.5rem; }
      table { border-collapse: collapse; width: 100%; }
      td, th { border-bottom: 1px solid #ddd; padding: 0.4rem; text-align: left; }
    </style>
  </head>
  <body>
    <h1>My Books</h1>
    <div class="row">
      <button onclick="signOut()">Sign out</button>
    </div>
    <form id="add" class="row">
      <input id="title" placeholder="Title" required />
      <input id="author" placeholder="Author" required />
      <select id="status">
        <option value="reading">Reading</option>
        <option value="completed">Completed</option>
        <option value="wishlist">Wishlist</option>
      </select>
      <button type="submit" id="add-button">Add book</button>
    </form>
    <div class="row">
      <select id="filter" onchange="loadBooks()">
        <option value="">All</option>
        <option value="reading">Reading</option>
        <option value="completed">Completed</option>
        <option value="wishlist">Wishlist</option>
      </select>
      <input id="search" placeholder="Search title or author" oninput="loadBooks()" />
    </div>
    <table>
      <thead><tr><th>Title</th><th>Author</th><th>Status</th><th></th></tr></thead>
      <tbody id="books"></tbody>
    </table>
    <script>
      function escapeHtml(value) {
        const div = document.createElement('div');
        div.textContent = value;
        return div.innerHTML;
      }

      function handleUnauthorized(res) {
        if (res.status === 401) {
          window.location.href = '/auth/login';
          return true;
        }
        return false;
      }

      async function loadBooks() {
        const params = new URLSearchParams();
        const filter = document.getElementById('filter').value;
        const search = document.getElementById('search').value;
        if (filter) params.append('status', filter);
        if (search) params.append('search', search);
        try {
          const res = await fetch('/api/books?' + params);
          if (handleUnauthorized(res)) return;
          const data = await res.json();
          if (!res.ok) {
            console.error('Error fetching books:', data.error);
            return;
          }
          renderBooks(data.books);
        } catch (err) {
          console.error('Error fetching books:', err);
        }
      }

      function renderBooks(books) {
        const rows = books.map((book) => `
          <tr>
            <td>${escapeHtml(book.title)}</td>
            <td>${escapeHtml(book.author)}</td>
            <td>
              <select onchange="updateStatus('${book.id}', this.value)">
                ${['reading', 'completed', 'wishlist'].map((s) =>
                  `<option value="${s}" ${s === book.status ? 'selected' : ''}>${s}</option>`
                ).join('')}
              </select>
            </td>
            <td><button onclick="deleteBook('${book.id}')">Delete</button></td>
          </tr>`);
        document.getElementById('books').innerHTML = rows.join('');
      }

      async function mutate(url, options, label) {
        try {
          const res = await fetch(url, options);
          if (handleUnauthorized(res)) return null;
          const data = await res.json();
          if (!res.ok) {
            alert('Error ' + label + ': ' + data.error);
            return null;
          }
          return data;
        } catch (err) {
          alert('Error ' + label);
          return null;
        }
      }

      document.getElementById('add').addEventListener('submit', async (e) => {
        e.preventDefault();
        const button = document.getElementById('add-button');
        button.disabled = true;
        const data = await mutate('/api/books', {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify({
            title: document.getElementById('title').value,
            author: document.getElementById('author').value,
            status: document.getElementById('status').value
          })
        }, 'adding book');
        button.disabled = false;
        if (data) {
          document.getElementById('add').reset();
          loadBooks();
        }
      });

      async function updateStatus(id, status) {
        await mutate('/api/books/' + id, {
          method: 'PATCH',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify({ status })
        }, 'updating book');
        loadBooks();
      }

      async function deleteBook(id) {
        if (!confirm('Are you sure you want to delete this book?')) return;
        const data = await mutate('/api/books/' + id, { method: 'DELETE' }, 'deleting book');
        if (data) loadBooks();
      }

      async function signOut() {
        await fetch('/api/session', { method: 'DELETE' });
        window.location.href = '/auth/login';
      }

      loadBooks();
    </script>
  </body>
</html>
"""
