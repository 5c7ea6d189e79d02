from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./stonequote.db"
    COMPANY_NAME: str = "Stone Benchtop Fabrication"
    CURRENCY: str = "AUD"

    # Engine defaults, merged into every RateConfig built from the catalog
    BASE_THICKNESS_MM: int = 20
    MAX_SLAB_LENGTH_MM: int = 3200  # Workable length of a jumbo engineered slab
    MAX_SLAB_WIDTH_MM: int = 1600
    SLAB_EDGE_TRIM_MM: int = 20  # Trimmed off each side of a material's own slab size
    GRAIN_MATCHING_SURCHARGE_PERCENT: float = 15.0
    CUTOUT_THICKNESS_MULTIPLIER: float = 1.0
    JOIN_SYMMETRY_TOLERANCE_MM: int = 200

    # Unit basis for the single-channel services
    CUTTING_UNIT: str = "LINEAR_METRE"  # LINEAR_METRE | SQUARE_METRE
    POLISHING_UNIT: str = "LINEAR_METRE"  # LINEAR_METRE | SQUARE_METRE
    INSTALLATION_UNIT: str = "SQUARE_METRE"  # SQUARE_METRE | LINEAR_METRE | FIXED

    class Config:
        env_file = ".env"


settings = Settings()
