from changebag import db


class Country(db.Model):
    __tablename__ = "countries"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    code = db.Column(db.String(10), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    # Relationships
    cities = db.relationship("City", back_populates="country", cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "isActive": self.is_active,
        }

    def __repr__(self):
        return f"<Country {self.code}>"


class City(db.Model):
    __tablename__ = "cities"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    state = db.Column(db.String(100))
    country_id = db.Column(db.Integer, db.ForeignKey("countries.id"), nullable=False, index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    # Relationships
    country = db.relationship("Country", back_populates="cities")
    points = db.relationship("DistributionPoint", back_populates="city", cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "state": self.state,
            "countryId": self.country_id,
            "isActive": self.is_active,
        }

    def __repr__(self):
        return f"<City {self.name}>"


class DistributionCategory(db.Model):
    """Kind of venue totes are handed out at (malls, colleges, ...)."""

    __tablename__ = "distribution_categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    icon = db.Column(db.String(50), nullable=False)
    color = db.Column(db.String(20), nullable=False)
    default_tote_count = db.Column(db.Integer, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    # Relationships
    points = db.relationship("DistributionPoint", back_populates="category", cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "color": self.color,
            "defaultToteCount": self.default_tote_count,
            "isActive": self.is_active,
        }

    def __repr__(self):
        return f"<DistributionCategory {self.name}>"


class DistributionPoint(db.Model):
    """A named venue in a city where a sponsor's totes can be handed out."""

    __tablename__ = "distribution_points"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    city_id = db.Column(db.Integer, db.ForeignKey("cities.id"), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey("distribution_categories.id"), nullable=False)
    default_tote_count = db.Column(db.Integer, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    # Relationships
    city = db.relationship("City", back_populates="points")
    category = db.relationship("DistributionCategory", back_populates="points")

    __table_args__ = (
        db.Index("idx_distribution_points_city_category", "city_id", "category_id"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "cityId": self.city_id,
            "categoryId": self.category_id,
            "defaultToteCount": self.default_tote_count,
            "isActive": self.is_active,
        }

    def __repr__(self):
        return f"<DistributionPoint {self.name}>"
