from typing import Tuple

from .domain import BookPayload, AVAILABLE, ISSUED


def create_sample_books() -> Tuple[BookPayload, ...]:
    """Twelve-book catalogue the in-memory backend starts with"""
    return (
        BookPayload("To Kill a Mockingbird", "Harper Lee", "Fiction", 1960, AVAILABLE),
        BookPayload("1984", "George Orwell", "Dystopian", 1949, ISSUED),
        BookPayload("Pride and Prejudice", "Jane Austen", "Romance", 1813, AVAILABLE),
        BookPayload("The Great Gatsby", "F. Scott Fitzgerald", "Fiction", 1925, AVAILABLE),
        BookPayload("The Hobbit", "J.R.R. Tolkien", "Fantasy", 1937, ISSUED),
        BookPayload("Brave New World", "Aldous Huxley", "Dystopian", 1932, AVAILABLE),
        BookPayload("The Da Vinci Code", "Dan Brown", "Thriller", 2003, AVAILABLE),
        BookPayload("Murder on the Orient Express", "Agatha Christie", "Mystery", 1934, ISSUED),
        BookPayload("Sapiens", "Yuval Noah Harari", "Non-Fiction", 2011, AVAILABLE),
        BookPayload("Steve Jobs", "Walter Isaacson", "Biography", 2011, AVAILABLE),
        BookPayload("The Pillars of the Earth", "Ken Follett", "Historical Fiction", 1989, ISSUED),
        BookPayload("Treasure Island", "Robert Louis Stevenson", "Adventure", 1883, AVAILABLE),
    )
