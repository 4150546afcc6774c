"""
Schema and sample rows for a local vehicle inventory.

Used by ``scripts/create_sample_vehicle_db.py`` and the test suite. Text
columns mix English and Spanish the way dealer listings do.
"""
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional

from carsearch.utils.logger import get_logger

logger = get_logger("data.sample_inventory")

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS vehicles (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    brand TEXT,
    model TEXT,
    year INTEGER,
    price TEXT,
    exterior TEXT,
    interior TEXT,
    transmission TEXT,
    fuel TEXT,
    engine TEXT,
    condition TEXT,
    body_type TEXT,
    traction TEXT,
    passengers INTEGER,
    location TEXT,
    address TEXT
)
"""

COLUMNS = (
    "brand", "model", "year", "price", "exterior", "interior", "transmission", "fuel",
    "engine", "condition", "body_type", "traction", "passengers", "location", "address",
)

SAMPLE_VEHICLES: List[Dict[str, Any]] = [
    {
        "brand": "Toyota", "model": "Corolla", "year": 2019, "price": "US$ 18,500",
        "exterior": "Rojo", "interior": "Negro", "transmission": "Automática", "fuel": "Gasolina",
        "engine": "1.8L 4 cilindros", "condition": "Usado", "body_type": "Sedan",
        "traction": "FWD", "passengers": 5,
        "location": "Santo Domingo, República Dominicana", "address": "Av. 27 de Febrero 101",
    },
    {
        "brand": "BMW", "model": "X5", "year": 2020, "price": "$45,000",
        "exterior": "Black Sapphire Metallic", "interior": "Beige", "transmission": "Automatic",
        "fuel": "Gasoline", "engine": "3.0L 6-cylinder Turbo", "condition": "Used", "body_type": "SUV",
        "traction": "AWD", "passengers": 5,
        "location": "Santo Domingo, Dominican Republic", "address": "Av. Abraham Lincoln 55",
    },
    {
        "brand": "BMW", "model": "530i", "year": 2022, "price": "$62,000",
        "exterior": "Alpine White", "interior": "Black", "transmission": "Automatic",
        "fuel": "Gasoline", "engine": "2.0L 4-cylinder Turbo", "condition": "New", "body_type": "Sedan",
        "traction": "RWD", "passengers": 5,
        "location": "Santo Domingo, Dominican Republic", "address": "Av. Abraham Lincoln 55",
    },
    {
        "brand": "Ford", "model": "Mustang GT", "year": 2018, "price": "$35,900",
        "exterior": "Race Red", "interior": "Black", "transmission": "Manual",
        "fuel": "Gasoline", "engine": "5.0L V8", "condition": "Used", "body_type": "Coupe",
        "traction": "RWD", "passengers": 4,
        "location": "Santiago, Dominican Republic", "address": "Calle del Sol 12",
    },
    {
        "brand": "Chevrolet", "model": "Camaro SS", "year": 2017, "price": "$31,000",
        "exterior": "Amarillo", "interior": "Negro", "transmission": "Automática",
        "fuel": "Gasolina", "engine": "6.2L 8-cylinder", "condition": "Usado", "body_type": "Coupe",
        "traction": "RWD", "passengers": 4,
        "location": "Punta Cana", "address": "Bávaro, Punta Cana, República Dominicana",
    },
    {
        "brand": "Toyota", "model": "Hilux", "year": 2021, "price": "US$ 42,000",
        "exterior": "Blanco", "interior": "Gris", "transmission": "Manual",
        "fuel": "Diésel", "engine": "2.8L 4 cilindros Turbo Diesel", "condition": "Usado",
        "body_type": "Pickup", "traction": "4x4", "passengers": 5,
        "location": "Santiago, República Dominicana", "address": "Autopista Duarte Km 5",
    },
    {
        "brand": "Honda", "model": "Civic", "year": 2020, "price": "$21,000",
        "exterior": "Platinum White Pearl", "interior": "Black", "transmission": "Automatic",
        "fuel": "Gasoline", "engine": "2.0L 4-cylinder", "condition": "Used", "body_type": "Sedan",
        "traction": "FWD", "passengers": 5,
        "location": "Santo Domingo, Dominican Republic", "address": "Av. Winston Churchill 80",
    },
    {
        "brand": "Hyundai", "model": "Tucson", "year": 2023, "price": "$29,500",
        "exterior": "Gris", "interior": "Negro", "transmission": "Automática",
        "fuel": "Híbrido", "engine": "1.6L 4 cilindros Turbo Híbrido", "condition": "Nuevo",
        "body_type": "SUV", "traction": "AWD", "passengers": 5,
        "location": "La Romana, República Dominicana", "address": "Calle Duarte 40",
    },
    {
        "brand": "Mercedes-Benz", "model": "C300", "year": 2021, "price": "$39,000",
        "exterior": "Obsidian Black", "interior": "Red", "transmission": "Automatic",
        "fuel": "Gasoline", "engine": "2.0L 4-cylinder Turbo", "condition": "Used", "body_type": "Sedan",
        "traction": "RWD", "passengers": 5,
        "location": "Santo Domingo, Dominican Republic", "address": "Av. Gustavo Mejía Ricart 7",
    },
    {
        "brand": "Kia", "model": "Sportage", "year": 2022, "price": "$27,000",
        "exterior": "Azul", "interior": "Negro", "transmission": "Automática",
        "fuel": "Gasolina", "engine": "2.0L 4 cilindros", "condition": "Usado", "body_type": "SUV",
        "traction": "FWD", "passengers": 5,
        "location": "Puerto Plata", "address": "Av. Luis Ginebra 3, Puerto Plata, Dominican Republic",
    },
    {
        "brand": "Nissan", "model": "Frontier", "year": 2019, "price": "$24,000",
        "exterior": "Silver", "interior": "Gray", "transmission": "Manual",
        "fuel": "Diesel", "engine": "2.5L 4-cylinder Diesel", "condition": "Used", "body_type": "Pickup",
        "traction": "4x4", "passengers": 5,
        "location": "San Pedro de Macorís, Dominican Republic", "address": "Carretera Mella 22",
    },
    {
        "brand": "Tesla", "model": "Model 3", "year": 2023, "price": "$44,000",
        "exterior": "Red Multi-Coat", "interior": "White", "transmission": "Automatic",
        "fuel": "Electric", "engine": "Dual Motor Electric", "condition": "New", "body_type": "Sedan",
        "traction": "AWD", "passengers": 5,
        "location": "Miami, FL, USA", "address": "1200 Biscayne Blvd, Miami",
    },
]


def create_database(db_path: Path, vehicles: Optional[List[Dict[str, Any]]] = None) -> Path:
    """
    Create (or extend) a vehicle inventory database.

    Args:
        db_path: SQLite file to create
        vehicles: Rows to insert (defaults to SAMPLE_VEHICLES)

    Returns:
        The database path
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    rows = SAMPLE_VEHICLES if vehicles is None else vehicles

    placeholders = ", ".join("?" for _ in COLUMNS)
    insert_sql = f"INSERT INTO vehicles ({', '.join(COLUMNS)}) VALUES ({placeholders})"

    conn = sqlite3.connect(db_path)
    try:
        conn.execute(SCHEMA_SQL)
        conn.executemany(insert_sql, [tuple(row.get(col) for col in COLUMNS) for row in rows])
        conn.commit()
    finally:
        conn.close()

    logger.info(f"Wrote {len(rows)} vehicles to {db_path}")
    return db_path
