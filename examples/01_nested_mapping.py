"""
Example 01: Nested Mapping

This example demonstrates rebuilding blogs, their posts and each post's
labels from a single LEFT JOIN query using RowGraph's Mapper.
"""

from row_graph import Mapper, column
from dataclasses import dataclass, field
import sqlite3


@dataclass
class Label:
    """Label attached to a post"""
    id: int
    name: str


@dataclass
class Author:
    """Post author"""
    id: int
    name: str


@dataclass
class Post:
    """Post with its author and labels"""
    id: int
    title: str
    author: Author = column(delimiter="->")
    labels: list[Label] = field(default_factory=list)


@dataclass
class Blog:
    """Blog aggregate root with posts collection"""
    id: int
    name: str
    posts: list[Post] = field(default_factory=list)


def main():
    conn = sqlite3.connect(":memory:")
    conn.executescript("""
        CREATE TABLE blogs (id INTEGER PRIMARY KEY, name TEXT NOT NULL);
        CREATE TABLE authors (id INTEGER PRIMARY KEY, name TEXT NOT NULL);
        CREATE TABLE posts (
            id INTEGER PRIMARY KEY,
            blog_id INTEGER NOT NULL,
            author_id INTEGER NOT NULL,
            title TEXT NOT NULL
        );
        CREATE TABLE labels (id INTEGER PRIMARY KEY, post_id INTEGER NOT NULL, name TEXT NOT NULL);

        INSERT INTO blogs VALUES (1, 'Engineering'), (2, 'Empty Blog');
        INSERT INTO authors VALUES (1, 'Alice'), (2, 'Bob');
        INSERT INTO posts VALUES (101, 1, 1, 'Joins without tears'), (102, 1, 2, 'Indexes');
        INSERT INTO labels VALUES (1001, 101, 'sql'), (1002, 101, 'python'), (1003, 102, 'sql');
    """)

    # Association columns are prefixed with the field path. The author
    # association joins its whole path with "->" instead of "_".
    cursor = conn.execute("""
        SELECT
            b.id, b.name,
            p.id AS posts_id,
            p.title AS posts_title,
            a.id AS "posts->author->id",
            a.name AS "posts->author->name",
            l.id AS posts_labels_id,
            l.name AS posts_labels_name
        FROM blogs b
        LEFT JOIN posts p ON p.blog_id = b.id
        LEFT JOIN authors a ON a.id = p.author_id
        LEFT JOIN labels l ON l.post_id = p.id
        ORDER BY b.id, p.id, l.id
    """)

    print("=== Nested Mapping ===\n")

    blogs = Mapper(list[Blog]).map_cursor(cursor)

    print(f"Reconstructed {len(blogs)} blogs:\n")
    for blog in blogs:
        print(f"Blog: {blog.name}")
        print(f"  Posts ({len(blog.posts)}):")
        for post in blog.posts:
            labels = ", ".join(label.name for label in post.labels)
            print(f"    - #{post.id} {post.title} by {post.author.name} [{labels}]")
        print()

    conn.close()


if __name__ == "__main__":
    main()
