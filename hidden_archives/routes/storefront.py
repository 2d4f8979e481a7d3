from flask import Blueprint, render_template

from hidden_archives.extensions import db
from hidden_archives.models import TAXONOMY, Category

storefront_bp = Blueprint("storefront", __name__)


@storefront_bp.route("/", methods=["GET"])
def home():
    return render_template("storefront/home.html")


@storefront_bp.route("/shop/", methods=["GET"])
def shop():
    """Fallback listing page for hidden archives"""
    categories = Category.query.filter_by(taxonomy=TAXONOMY).order_by(Category.name).all()
    return render_template("storefront/shop.html", categories=categories)


@storefront_bp.route("/product-category/<slug>/", methods=["GET"])
def category_archive(slug):
    """Category archive; hidden ones never get here (see template_redirect)"""
    category = db.first_or_404(
        db.select(Category).filter_by(slug=slug, taxonomy=TAXONOMY),
        description=f"No product category with slug '{slug}'",
    )
    return render_template("storefront/category_archive.html", category=category)
