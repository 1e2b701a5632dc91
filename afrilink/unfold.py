from __future__ import annotations


def _moderation_items():
    """Items of the "Moderation" group, one per review queue."""
    from afrilink.models import Product, Profile

    counts = {
        status: Product.objects.filter(status=status).count()
        for status in (Product.Status.PENDING, Product.Status.PENDING_TAKEDOWN)
    }
    verification_queue = Profile.objects.filter(
        verification_status=Profile.VerificationStatus.PENDING_REVIEW
    ).count()
    return [
        {
            "title": f"Pending review ({counts[Product.Status.PENDING]})",
            "icon": "rule",
            "link": "/admin/afrilink/product/?status__exact=pending",
        },
        {
            "title": f"Takedown requests ({counts[Product.Status.PENDING_TAKEDOWN]})",
            "icon": "remove_shopping_cart",
            "link": "/admin/afrilink/product/?status__exact=pending_takedown",
        },
        {
            "title": f"Verification queue ({verification_queue})",
            "icon": "verified_user",
            "link": "/admin/afrilink/profile/?verification_status__exact=pending_review",
        },
        {
            "title": "Live products",
            "icon": "inventory_2",
            "link": "/admin/afrilink/product/?status__exact=approved",
        },
    ]


def get_sidebar_navigation(request):
    """
    Admin/Unfold: returns `UNFOLD['SIDEBAR']['navigation']`.

    `SIDEBAR.navigation` may be a callable, but `group['items']` must be a list.
    """
    return [
        {
            "title": "Moderation",
            "icon": "shield",
            "items": _moderation_items(),
        },
        {
            "title": "Marketplace",
            "icon": "storefront",
            "items": [
                {
                    "title": "Applications",
                    "icon": "assignment_ind",
                    "link": "/admin/afrilink/application/?status__exact=pending",
                },
                {
                    "title": "Profiles",
                    "icon": "badge",
                    "link": "/admin/afrilink/profile/",
                },
                {
                    "title": "Notifications",
                    "icon": "notifications",
                    "link": "/admin/afrilink/notification/",
                },
            ],
        },
    ]
